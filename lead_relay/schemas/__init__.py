"""Public schema exports."""

from .contact import (
    BrevoSubscription,
    ContactSubmission,
    ContactUpsertResponse,
    HealthResponse,
    RelayErrorResponse,
)

__all__ = [
    "BrevoSubscription",
    "ContactSubmission",
    "ContactUpsertResponse",
    "HealthResponse",
    "RelayErrorResponse",
]
