"""
FastAPI application entrypoint for the lead relay.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lead_relay import __version__
from lead_relay.api.routes import public_router, router as api_router
from lead_relay.core.config import AppSettings, get_settings
from lead_relay.core.logging import configure_logging
from lead_relay.services.rate_limit import RateLimitExceeded
from lead_relay.services.record_mapper import SubmissionValidationError

logger = logging.getLogger(__name__)


async def _submission_error_handler(
    request: Request, exc: SubmissionValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST, content={"error": str(exc)}
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected malformed request to %s", request.url.path)
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={"error": "Bad request", "detail": _jsonable_errors(exc)},
    )


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded for %s", exc)
    return JSONResponse(
        status_code=HTTPStatus.TOO_MANY_REQUESTS,
        content={"error": "Too many requests"},
    )


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce validation errors to their location and message."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def _configure_cors(app: FastAPI, settings: AppSettings) -> None:
    origins = [settings.allowed_origin] if settings.allowed_origin else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=600,
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Lead Relay",
        version=__version__,
        description="Relays web form submissions to Zoho CRM and Brevo.",
    )
    _configure_cors(app, settings)
    app.add_exception_handler(SubmissionValidationError, _submission_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.include_router(public_router)
    app.include_router(api_router, prefix="/api")
    logger.info(
        "Lead relay configured (env=%s, zoho region=%s)",
        settings.environment,
        settings.zoho.region,
    )
    return app


app = create_app()

__all__ = ["app", "create_app"]
