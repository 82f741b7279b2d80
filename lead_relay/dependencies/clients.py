"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from lead_relay.clients import BrevoClient, ZohoCRMClient, ZohoOAuthClient
from lead_relay.core.config import get_settings
from lead_relay.services import (
    BrevoContactService,
    FixedWindowRateLimiter,
    RecordMapper,
    TokenCache,
    UpsertOrchestrator,
    ZohoTokenService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cache() -> TokenCache:
    """Provide the process-wide Zoho access token cache."""
    return TokenCache()


@lru_cache()
def get_zoho_oauth_client() -> ZohoOAuthClient:
    """Create a singleton Zoho OAuth client."""
    return ZohoOAuthClient(_settings().http)


@lru_cache()
def get_zoho_token_service() -> ZohoTokenService:
    """Provide helper for obtaining Zoho access tokens."""
    settings = _settings()
    return ZohoTokenService(
        oauth_client=get_zoho_oauth_client(),
        credential=settings.zoho.credential(),
        cache=get_token_cache(),
    )


@lru_cache()
def get_zoho_crm_client() -> ZohoCRMClient:
    """Provide Zoho CRM client bound to the configured module."""
    settings = _settings()
    return ZohoCRMClient(
        api_domain=settings.zoho.api_domain,
        module=settings.zoho.module,
        http_settings=settings.http,
    )


@lru_cache()
def get_record_mapper() -> RecordMapper:
    """Provide the attribute-to-Zoho field mapper."""
    return RecordMapper(default_lead_source=_settings().zoho.lead_source)


def get_upsert_orchestrator() -> UpsertOrchestrator:
    """Build an upsert orchestrator sharing the process token cache."""
    return UpsertOrchestrator(
        token_service=get_zoho_token_service(),
        crm_client=get_zoho_crm_client(),
    )


def get_brevo_contact_service() -> BrevoContactService | None:
    """Provide the Brevo relay when an API key is configured."""
    settings = _settings()
    if not settings.brevo.api_key:
        return None
    client = BrevoClient(settings.brevo.api_key, settings.http)
    return BrevoContactService(client, default_list_id=settings.brevo.list_id)


@lru_cache()
def get_rate_limiter() -> FixedWindowRateLimiter:
    """Provide the per-IP limiter shared by the relay endpoints."""
    return FixedWindowRateLimiter(max_hits=_settings().rate_limit_per_minute)


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
