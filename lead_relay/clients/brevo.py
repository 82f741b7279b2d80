"""Brevo contacts API wrapper."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from lead_relay.core.config import HTTPSettings
from lead_relay.utils.http import RetryConfig, parse_body, send_with_retry

BREVO_API_BASE = "https://api.brevo.com/v3"


class BrevoRequestError(Exception):
    """Raised when Brevo rejects a contact request."""

    def __init__(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Brevo returned HTTP {status_code}")

    @property
    def is_duplicate(self) -> bool:
        """True when a create failed only because the contact already exists."""
        if self.status_code != httpx.codes.BAD_REQUEST or not isinstance(self.body, dict):
            return False
        message = str(self.body.get("message") or "").lower()
        return self.body.get("code") == "duplicate_parameter" or "already exists" in message


class BrevoClient:
    """Create and update Brevo contacts."""

    def __init__(
        self,
        api_key: str,
        http_settings: HTTPSettings,
        *,
        base_url: str = BREVO_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = http_settings.timeout_seconds
        self._retry = RetryConfig(attempts=http_settings.timeout_retries + 1)
        self._transport = transport

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "api-key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _send(self, method: str, path: str, body: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            response = await send_with_retry(
                lambda: client.request(
                    method, f"{self._base_url}{path}", json=body, headers=self._headers
                ),
                retry_config=self._retry,
            )

        if not response.is_success:
            raise BrevoRequestError(response.status_code, parse_body(response))
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return {}
        return parse_body(response)

    async def create_contact(
        self,
        email: str,
        attributes: Dict[str, Any],
        list_ids: Optional[List[int]] = None,
    ) -> Any:
        """Create a contact, letting Brevo update it when it already exists."""
        body: Dict[str, Any] = {
            "email": email,
            "attributes": attributes,
            "updateEnabled": True,
        }
        if list_ids:
            body["listIds"] = list_ids
        return await self._send("POST", "/contacts", body)

    async def update_contact(
        self,
        email: str,
        attributes: Dict[str, Any],
        list_ids: Optional[List[int]] = None,
    ) -> Any:
        """Update an existing contact identified by email."""
        body: Dict[str, Any] = {"attributes": attributes}
        if list_ids:
            body["listIds"] = list_ids
        return await self._send("PUT", f"/contacts/{quote(email, safe='')}", body)


__all__ = ["BREVO_API_BASE", "BrevoClient", "BrevoRequestError"]
