"""Thin async wrapper around the Zoho CRM upsert endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from lead_relay.core.config import HTTPSettings
from lead_relay.models.contact import ContactRecord
from lead_relay.utils.http import RetryConfig, parse_body, send_with_retry

logger = logging.getLogger(__name__)

CRM_API_VERSION = "v2"


class UpstreamUpsertError(Exception):
    """Raised when Zoho CRM rejects an upsert."""

    def __init__(self, status_code: int, detail: Any) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Zoho CRM upsert failed with HTTP {status_code}")


class TransientAuthError(UpstreamUpsertError):
    """Raised when Zoho CRM reports the access token as unauthorized."""


class ZohoCRMClient:
    """Submit single-record upsert batches to a Zoho CRM module."""

    def __init__(
        self,
        *,
        api_domain: str,
        module: str,
        http_settings: HTTPSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._upsert_url = (
            f"{api_domain.rstrip('/')}/crm/{CRM_API_VERSION}/{module}/upsert"
        )
        self._timeout = http_settings.timeout_seconds
        self._retry = RetryConfig(attempts=http_settings.timeout_retries + 1)
        self._transport = transport

    async def upsert(self, access_token: str, record: ContactRecord) -> Dict[str, Any]:
        """Upsert ``record`` keyed on Email and return the parsed batch body."""
        payload = {
            "data": [record.to_payload()],
            "duplicate_check_fields": ["Email"],
            "trigger": ["workflow"],
        }
        headers = {
            "Authorization": f"Zoho-oauthtoken {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            response = await send_with_retry(
                lambda: client.post(self._upsert_url, json=payload, headers=headers),
                retry_config=self._retry,
            )

        body = parse_body(response)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise TransientAuthError(response.status_code, body)
        if not response.is_success:
            logger.warning("Zoho CRM upsert returned HTTP %s", response.status_code)
            raise UpstreamUpsertError(response.status_code, body)

        return body if isinstance(body, dict) else {"raw": body}


__all__ = ["TransientAuthError", "UpstreamUpsertError", "ZohoCRMClient"]
