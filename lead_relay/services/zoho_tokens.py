"""
Helpers for retrieving and refreshing Zoho access tokens.
"""

from __future__ import annotations

import logging

from lead_relay.clients.zoho_auth import ZohoOAuthClient
from lead_relay.models.token import AccessToken, RefreshCredential
from lead_relay.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


class ZohoTokenService:
    """Serves access tokens from the cache, refreshing them when stale.

    Concurrent callers that observe an expired cache each perform their own
    exchange; Zoho refresh tokens are reusable so the extra round trips are
    harmless.
    """

    def __init__(
        self,
        oauth_client: ZohoOAuthClient,
        credential: RefreshCredential,
        cache: TokenCache,
    ) -> None:
        self._oauth = oauth_client
        self._credential = credential
        self._cache = cache

    @property
    def cache(self) -> TokenCache:
        return self._cache

    async def get_access_token(self) -> AccessToken:
        """Return the cached token while valid, otherwise fetch a new one."""
        token = self._cache.get()
        if token is not None and self._cache.is_valid():
            return token
        return await self.fetch_access_token()

    async def fetch_access_token(self) -> AccessToken:
        """Perform a refresh-token exchange and overwrite the cache."""
        grant = await self._oauth.refresh_access_token(self._credential)
        return self._cache.set(grant.access_token, grant.expires_in)

    def invalidate(self) -> None:
        logger.warning("Invalidating cached Zoho access token")
        self._cache.invalidate()


__all__ = ["ZohoTokenService"]
