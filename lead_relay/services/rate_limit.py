"""Process-local fixed-window rate limiting for the relay endpoints."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict


class RateLimitExceeded(Exception):
    """Raised when a client exceeds its per-window request budget."""


@dataclass(slots=True)
class _Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Count hits per client key inside fixed windows."""

    _PRUNE_THRESHOLD = 1024

    def __init__(
        self,
        max_hits: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_hits = max_hits
        self._window = window_seconds
        self._clock = clock
        self._hits: Dict[str, _Window] = {}
        self._last_prune = clock()

    def hit(self, key: str) -> None:
        """Record a request for ``key``; raise once the budget is spent."""
        now = self._clock()
        # At most one sweep per window, however many keys are live.
        if (
            len(self._hits) >= self._PRUNE_THRESHOLD
            and now - self._last_prune >= self._window
        ):
            self._prune(now)

        window = self._hits.get(key)
        if window is None or now - window.started_at > self._window:
            window = _Window(started_at=now)
            self._hits[key] = window
        window.count += 1
        if window.count > self._max_hits:
            raise RateLimitExceeded(key)

    def _prune(self, now: float) -> None:
        self._last_prune = now
        stale = [k for k, w in self._hits.items() if now - w.started_at > self._window]
        for key in stale:
            del self._hits[key]


__all__ = ["FixedWindowRateLimiter", "RateLimitExceeded"]
