"""Expose constructed client wrappers."""

from .brevo import BrevoClient, BrevoRequestError
from .zoho_auth import AuthProviderError, ZohoOAuthClient
from .zoho_crm import TransientAuthError, UpstreamUpsertError, ZohoCRMClient

__all__ = [
    "AuthProviderError",
    "BrevoClient",
    "BrevoRequestError",
    "TransientAuthError",
    "UpstreamUpsertError",
    "ZohoCRMClient",
    "ZohoOAuthClient",
]
