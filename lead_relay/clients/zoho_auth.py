"""
Zoho OAuth utilities.

These helpers exchange the long-lived refresh token for short-lived access
tokens and support the one-off manual authorization flow.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from lead_relay.core.config import HTTPSettings
from lead_relay.models.token import RefreshCredential, TokenGrant
from lead_relay.utils.http import RetryConfig, parse_body, send_with_retry

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """Raised when the Zoho token endpoint rejects an exchange."""

    def __init__(self, status_code: int, body: Any, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Zoho token endpoint returned HTTP {status_code}")


class ZohoOAuthClient:
    """Build Zoho authorization URLs and exchange codes or refresh tokens."""

    TOKEN_PATH = "/oauth/v2/token"
    AUTH_PATH = "/oauth/v2/auth"

    def __init__(
        self,
        http_settings: HTTPSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = http_settings.timeout_seconds
        self._retry = RetryConfig(attempts=http_settings.timeout_retries + 1)
        self._transport = transport

    def build_authorization_url(
        self,
        *,
        accounts_domain: str,
        client_id: str,
        redirect_uri: str,
        scope: str,
        state: str | None = None,
    ) -> str:
        """Construct the Zoho consent URL requesting offline access."""
        params = {
            "response_type": "code",
            "client_id": client_id,
            "scope": scope,
            "redirect_uri": redirect_uri,
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{accounts_domain.rstrip('/')}{self.AUTH_PATH}?{urlencode(params)}"

    async def refresh_access_token(self, credential: RefreshCredential) -> TokenGrant:
        """Exchange the refresh token for a new access token."""
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": credential.refresh_token,
            "client_id": credential.client_id,
            "client_secret": credential.client_secret,
        }
        grant = await self._request_token(credential.accounts_domain, payload)
        logger.info("Obtained Zoho access token (expires_in=%s)", grant.expires_in)
        return grant

    async def exchange_authorization_code(
        self,
        *,
        accounts_domain: str,
        client_id: str,
        client_secret: str,
        code: str,
        redirect_uri: str,
    ) -> TokenGrant:
        """Exchange a one-time authorization code for a refresh token."""
        payload = {
            "grant_type": "authorization_code",
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
            "code": code,
        }
        return await self._request_token(accounts_domain, payload)

    async def _request_token(
        self, accounts_domain: str, payload: Dict[str, str]
    ) -> TokenGrant:
        url = f"{accounts_domain.rstrip('/')}{self.TOKEN_PATH}"

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            response = await send_with_retry(
                lambda: client.post(url, data=payload),
                retry_config=self._retry,
            )

        body = parse_body(response)
        if not response.is_success:
            logger.warning("Zoho token endpoint returned HTTP %s", response.status_code)
            raise AuthProviderError(response.status_code, body)

        # Zoho reports some failures (e.g. invalid_code) with HTTP 200.
        if not isinstance(body, dict) or "error" in body:
            raise AuthProviderError(
                response.status_code, body, "Zoho token endpoint returned an error payload"
            )

        access_token = body.get("access_token")
        if not access_token:
            raise AuthProviderError(
                response.status_code, body, "Incomplete token payload returned from Zoho"
            )

        expires_in = body.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires_in = None

        return TokenGrant(
            access_token=access_token,
            expires_in=expires_in,
            refresh_token=body.get("refresh_token"),
            api_domain=body.get("api_domain"),
            token_type=body.get("token_type"),
            scope=body.get("scope"),
            raw=body,
        )


__all__ = ["AuthProviderError", "ZohoOAuthClient"]
