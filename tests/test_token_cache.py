from __future__ import annotations

from lead_relay.services.token_cache import (
    FALLBACK_TTL_SECONDS,
    SAFETY_MARGIN_MS,
    TokenCache,
)


def test_empty_cache_is_invalid(clock) -> None:
    cache = TokenCache(clock=clock)

    assert cache.get() is None
    assert cache.is_valid() is False


def test_token_expires_at_safety_margin(clock) -> None:
    cache = TokenCache(clock=clock)
    token = cache.set("access-1", ttl_seconds=3600)

    assert cache.is_valid()
    assert cache.get() == token
    assert token.expires_at == int(clock.now * 1000) + 3_600_000

    clock.advance(3600 - 15 - 1)
    assert cache.is_valid()

    clock.advance(1)
    assert cache.is_valid() is False
    # Stale tokens are still returned; validity is the caller's check.
    assert cache.get() == token


def test_missing_or_non_positive_ttl_uses_fallback(clock) -> None:
    cache = TokenCache(clock=clock)

    for ttl in (None, 0, -30):
        token = cache.set("access", ttl_seconds=ttl)
        assert token.expires_at - int(clock.now * 1000) == FALLBACK_TTL_SECONDS * 1000


def test_set_overwrites_and_invalidate_is_idempotent(clock) -> None:
    cache = TokenCache(clock=clock)
    cache.set("first", ttl_seconds=60)
    second = cache.set("second", ttl_seconds=120)

    assert cache.get() == second

    cache.invalidate()
    cache.invalidate()
    assert cache.get() is None
    assert cache.is_valid() is False


def test_ttl_shorter_than_margin_is_never_valid(clock) -> None:
    cache = TokenCache(clock=clock)
    cache.set("short", ttl_seconds=SAFETY_MARGIN_MS / 1000)

    assert cache.is_valid() is False
