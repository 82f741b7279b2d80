"""
Relay normalized contact records to Zoho CRM.

Each upsert is a two-step state machine: the FIRST attempt uses whatever token
the cache holds (fetching one if it is empty or stale); a 401 moves to the
RETRY attempt, which always mints a fresh token. There is no third attempt.
"""

from __future__ import annotations

import logging
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict

from lead_relay.clients.zoho_auth import AuthProviderError
from lead_relay.clients.zoho_crm import (
    TransientAuthError,
    UpstreamUpsertError,
    ZohoCRMClient,
)
from lead_relay.models.contact import ContactRecord, UpsertOutcome
from lead_relay.services.zoho_tokens import ZohoTokenService

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "ok"


class UpsertAttempt(str, Enum):
    FIRST = "first"
    RETRY = "retry"


class UpsertOrchestrator:
    """Coordinate token acquisition and the retry-once-on-401 policy."""

    ATTEMPTS = (UpsertAttempt.FIRST, UpsertAttempt.RETRY)

    def __init__(self, token_service: ZohoTokenService, crm_client: ZohoCRMClient) -> None:
        self._tokens = token_service
        self._crm = crm_client

    async def upsert(self, record: ContactRecord) -> UpsertOutcome:
        """Upsert ``record`` and report what Zoho did with it."""
        for attempt in self.ATTEMPTS:
            try:
                if attempt is UpsertAttempt.FIRST:
                    token = await self._tokens.get_access_token()
                else:
                    token = await self._tokens.fetch_access_token()
            except AuthProviderError as exc:
                self._tokens.invalidate()
                logger.warning(
                    "Zoho token refresh failed on %s attempt (HTTP %s)",
                    attempt.value,
                    exc.status_code,
                )
                return UpsertOutcome.failure(
                    HTTPStatus.BAD_GATEWAY,
                    {"upstream_status": exc.status_code, "body": exc.body},
                )

            try:
                body = await self._crm.upsert(token.value, record)
            except TransientAuthError as exc:
                self._tokens.invalidate()
                if attempt is UpsertAttempt.RETRY:
                    logger.warning("Zoho CRM rejected a freshly minted token")
                    return UpsertOutcome.failure(exc.status_code, exc.detail)
                logger.info("Zoho CRM returned 401; retrying with a new token")
                continue
            except UpstreamUpsertError as exc:
                return UpsertOutcome.failure(exc.status_code, exc.detail)

            return self._interpret(body)

        # Unreachable: the RETRY attempt always returns.
        raise RuntimeError("Upsert attempts exhausted without an outcome")

    @staticmethod
    def _interpret(body: Dict[str, Any]) -> UpsertOutcome:
        """Extract the per-record result from a batch response."""
        data = body.get("data")
        first = data[0] if isinstance(data, list) and data else None
        if not isinstance(first, dict):
            return UpsertOutcome.success(DEFAULT_ACTION, body)

        if str(first.get("status", "")).lower() == "error":
            logger.warning("Zoho CRM rejected the record: %s", first.get("code"))
            return UpsertOutcome.failure(HTTPStatus.BAD_GATEWAY, first)

        action = first.get("action") or DEFAULT_ACTION
        return UpsertOutcome.success(str(action), first)


__all__ = ["UpsertAttempt", "UpsertOrchestrator"]
