"""In-memory holder for the current Zoho access token."""

from __future__ import annotations

import time
from typing import Callable, Optional

from lead_relay.models.token import AccessToken

SAFETY_MARGIN_MS = 15_000
FALLBACK_TTL_SECONDS = 3000


class TokenCache:
    """Single-slot, process-local access token cache.

    The slot is overwritten wholesale on every refresh and cleared when an
    upstream call reports the token as unauthorized. Nothing is persisted, so a
    cold process always performs one token exchange before its first upsert.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._token: Optional[AccessToken] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def is_valid(self) -> bool:
        """Return True while a token is present and outside the safety margin."""
        token = self._token
        if token is None:
            return False
        return self._now_ms() < token.expires_at - SAFETY_MARGIN_MS

    def get(self) -> Optional[AccessToken]:
        """Return the cached token without checking its expiry."""
        return self._token

    def set(self, value: str, ttl_seconds: Optional[float] = None) -> AccessToken:
        """Replace the cached token, falling back to a conservative TTL."""
        if not ttl_seconds or ttl_seconds <= 0:
            ttl_seconds = FALLBACK_TTL_SECONDS
        token = AccessToken(
            value=value,
            expires_at=self._now_ms() + int(ttl_seconds * 1000),
        )
        self._token = token
        return token

    def invalidate(self) -> None:
        self._token = None


__all__ = ["FALLBACK_TTL_SECONDS", "SAFETY_MARGIN_MS", "TokenCache"]
