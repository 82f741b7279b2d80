"""
FastAPI routes for the lead relay.
"""

from __future__ import annotations

import html
import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Annotated, Any, Awaitable

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from lead_relay.dependencies import (
    get_brevo_contact_service,
    get_rate_limiter,
    get_record_mapper,
    get_upsert_orchestrator,
)
from lead_relay.models.contact import UpsertOutcome
from lead_relay.schemas import (
    BrevoSubscription,
    ContactSubmission,
    ContactUpsertResponse,
    HealthResponse,
    RelayErrorResponse,
)
from lead_relay.services.record_mapper import reject_honeypot, validate_submission

router = APIRouter()
public_router = APIRouter()
logger = logging.getLogger(__name__)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": RelayErrorResponse},
    429: {"model": RelayErrorResponse},
    502: {"model": RelayErrorResponse},
}


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[Any, Depends(get_rate_limiter)],
) -> None:
    """Charge the caller's IP against the shared request budget."""
    limiter.hit(_client_ip(request))


async def _run_guarded(
    operation: Awaitable[UpsertOutcome], provider: str
) -> UpsertOutcome | JSONResponse:
    """Resolve every upstream failure inside the request handler."""
    try:
        return await operation
    except httpx.TimeoutException:
        logger.warning("%s did not answer within the configured timeout", provider)
        return JSONResponse(
            status_code=HTTPStatus.GATEWAY_TIMEOUT,
            content={"error": f"{provider} timed out"},
        )
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error relaying submission to %s", provider)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


@public_router.get("/health", response_model=HealthResponse, status_code=HTTPStatus.OK)
async def healthcheck() -> HealthResponse:
    """Simple health endpoint for monitoring."""
    return HealthResponse(status="ok", ts=datetime.now(timezone.utc).isoformat())


@public_router.get("/zoho/callback", response_class=HTMLResponse)
async def zoho_oauth_callback(
    code: str | None = Query(None, description="Authorization code issued by Zoho."),
    state: str | None = Query(None, description="Opaque state echoed by Zoho."),
    error: str | None = Query(None, description="Error reported by Zoho."),
) -> HTMLResponse:
    """Landing page for the one-off manual authorization flow."""
    if error:
        logger.warning("Zoho authorization was refused: %s", error)
        return HTMLResponse(
            f"<h1>Authorization failed</h1><p>{html.escape(error)}</p>",
            status_code=HTTPStatus.BAD_REQUEST,
        )
    if not code:
        return HTMLResponse(
            "<h1>Missing authorization code</h1>",
            status_code=HTTPStatus.BAD_REQUEST,
        )

    logger.info("Received Zoho authorization code (state=%s): %s", state, code)
    return HTMLResponse(
        "<h1>Authorization received</h1>"
        "<p>The code was logged on the server. Exchange it for a refresh token "
        "with <code>python -m scripts.zoho_oauth exchange CODE</code>; it expires "
        "in about two minutes.</p>"
    )


@router.post(
    "/zoho/contact", response_model=ContactUpsertResponse, responses=_ERROR_RESPONSES
)
@router.post(
    "/zoho/lead", response_model=ContactUpsertResponse, responses=_ERROR_RESPONSES
)
async def relay_zoho_contact(
    payload: ContactSubmission,
    mapper: Annotated[Any, Depends(get_record_mapper)],
    orchestrator: Annotated[Any, Depends(get_upsert_orchestrator)],
    _: Annotated[None, Depends(enforce_rate_limit)],
) -> Any:
    """Normalize a form submission and upsert it into Zoho CRM."""
    reject_honeypot(payload.honeypot)
    record = mapper.build_record(payload.email, payload.attributes)

    outcome = await _run_guarded(orchestrator.upsert(record), "Zoho CRM")
    if isinstance(outcome, JSONResponse):
        return outcome

    if outcome.succeeded:
        logger.info("Relayed contact to Zoho CRM (action=%s)", outcome.action)
        return ContactUpsertResponse(action=outcome.action, zoho=outcome.detail)

    return JSONResponse(
        status_code=outcome.status_code or HTTPStatus.BAD_GATEWAY,
        content={"error": "Zoho upsert failed", "detail": outcome.detail},
    )


@router.post("/brevo/subscribe", responses=_ERROR_RESPONSES)
async def relay_brevo_subscription(
    payload: BrevoSubscription,
    service: Annotated[Any, Depends(get_brevo_contact_service)],
    _: Annotated[None, Depends(enforce_rate_limit)],
) -> Any:
    """Create or update a Brevo contact from a newsletter form."""
    reject_honeypot(payload.honeypot)
    email, attributes = validate_submission(payload.email, payload.attributes)

    if service is None:
        return JSONResponse(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            content={"error": "Brevo relay is not configured"},
        )

    outcome = await _run_guarded(
        service.subscribe(email, attributes, payload.list_ids), "Brevo"
    )
    if isinstance(outcome, JSONResponse):
        return outcome

    if outcome.succeeded:
        return outcome.detail
    return JSONResponse(status_code=outcome.status_code, content=outcome.detail)


__all__ = ["enforce_rate_limit", "public_router", "router"]
