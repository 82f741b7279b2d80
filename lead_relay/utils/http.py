"""HTTP utilities providing bounded timeout/retry semantics."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 2, backoff_seconds: float = 0.0) -> None:
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds


async def send_with_retry(
    send: Callable[[], Awaitable[httpx.Response]],
    *,
    retry_config: RetryConfig | None = None,
) -> httpx.Response:
    """Run ``send`` again when it times out or cannot connect.

    Only transport failures are retried; any HTTP response, whatever its
    status, is returned to the caller untouched.
    """
    config = retry_config or RetryConfig()
    attempt = 0

    while True:
        try:
            return await send()
        except (httpx.TimeoutException, httpx.ConnectError) as exc:
            attempt += 1
            if attempt >= config.attempts:
                raise
            logger.warning(
                "Upstream transport failure (%s); retrying (%d/%d)",
                exc.__class__.__name__,
                attempt,
                config.attempts - 1,
            )
            if config.backoff_seconds:
                await asyncio.sleep(config.backoff_seconds * attempt)


def parse_body(response: httpx.Response):
    """Return the JSON body, or the raw text when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


__all__ = ["RetryConfig", "parse_body", "send_with_retry"]
