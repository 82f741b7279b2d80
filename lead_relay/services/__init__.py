"""Service layer exports."""

from .brevo_contacts import BrevoContactService
from .rate_limit import FixedWindowRateLimiter, RateLimitExceeded
from .record_mapper import RecordMapper, SubmissionValidationError
from .token_cache import TokenCache
from .zoho_tokens import ZohoTokenService
from .zoho_upsert import UpsertAttempt, UpsertOrchestrator

__all__ = [
    "BrevoContactService",
    "FixedWindowRateLimiter",
    "RateLimitExceeded",
    "RecordMapper",
    "SubmissionValidationError",
    "TokenCache",
    "UpsertAttempt",
    "UpsertOrchestrator",
    "ZohoTokenService",
]
