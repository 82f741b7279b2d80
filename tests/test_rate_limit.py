from __future__ import annotations

import pytest

from lead_relay.services.rate_limit import FixedWindowRateLimiter, RateLimitExceeded


def test_budget_is_tracked_per_key(clock) -> None:
    limiter = FixedWindowRateLimiter(max_hits=2, clock=clock)

    limiter.hit("10.0.0.1")
    limiter.hit("10.0.0.1")
    limiter.hit("10.0.0.2")

    with pytest.raises(RateLimitExceeded):
        limiter.hit("10.0.0.1")


def test_budget_resets_after_window(clock) -> None:
    limiter = FixedWindowRateLimiter(max_hits=1, window_seconds=60.0, clock=clock)

    limiter.hit("client")
    clock.advance(30)
    with pytest.raises(RateLimitExceeded):
        limiter.hit("client")

    clock.advance(31)
    limiter.hit("client")


def test_stale_windows_are_pruned(clock) -> None:
    limiter = FixedWindowRateLimiter(max_hits=1, window_seconds=1.0, clock=clock)
    for index in range(FixedWindowRateLimiter._PRUNE_THRESHOLD):
        limiter.hit(f"ip-{index}")

    clock.advance(5)
    limiter.hit("late")

    assert list(limiter._hits) == ["late"]


def test_live_keys_are_swept_at_most_once_per_window(clock) -> None:
    sweeps: list[float] = []

    class CountingLimiter(FixedWindowRateLimiter):
        def _prune(self, now: float) -> None:
            sweeps.append(now)
            super()._prune(now)

    limiter = CountingLimiter(max_hits=5, window_seconds=60.0, clock=clock)
    for index in range(FixedWindowRateLimiter._PRUNE_THRESHOLD + 200):
        limiter.hit(f"rotating-{index}")
    assert sweeps == []

    clock.advance(61)
    for index in range(50):
        limiter.hit(f"fresh-{index}")

    assert len(sweeps) == 1
    assert all(key.startswith("fresh-") for key in limiter._hits)
