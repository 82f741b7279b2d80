"""
Domain models for the Zoho OAuth token lifecycle.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RefreshCredential(BaseModel):
    """Long-lived credential used to mint access tokens."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    refresh_token: str
    accounts_domain: str = Field(
        ..., description="Accounts server hosting the token endpoint."
    )


class AccessToken(BaseModel):
    """Short-lived bearer credential held by the token cache."""

    model_config = ConfigDict(frozen=True)

    value: str
    expires_at: int = Field(
        ..., description="Absolute expiry expressed in epoch milliseconds."
    )


class TokenGrant(BaseModel):
    """Parsed response from the Zoho token endpoint."""

    access_token: str
    expires_in: Optional[int] = Field(
        None, description="Lifetime in seconds as reported by Zoho."
    )
    refresh_token: Optional[str] = None
    api_domain: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["AccessToken", "RefreshCredential", "TokenGrant"]
