"""
Logging utilities for the relay application and helper scripts.

Provides a consistent logging format and configuration.
"""

import logging
import sys

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and quiet the per-request httpx chatter."""
    logging.basicConfig(level=level.upper(), format=_FORMAT, stream=sys.stdout)
    if logging.getLogger().getEffectiveLevel() > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
