"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_brevo_contact_service,
    get_rate_limiter,
    get_record_mapper,
    get_token_cache,
    get_upsert_orchestrator,
    get_zoho_crm_client,
    get_zoho_oauth_client,
    get_zoho_token_service,
)

__all__ = [
    "get_brevo_contact_service",
    "get_rate_limiter",
    "get_record_mapper",
    "get_token_cache",
    "get_upsert_orchestrator",
    "get_zoho_crm_client",
    "get_zoho_oauth_client",
    "get_zoho_token_service",
]
