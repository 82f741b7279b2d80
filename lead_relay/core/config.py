"""
Application configuration models and helpers.

Centralizes settings management so the relay routes, the Zoho token service
and the helper scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lead_relay.models.token import RefreshCredential

# Region code -> (accounts domain, API domain).
REGION_DOMAINS: dict[str, tuple[str, str]] = {
    "com": ("https://accounts.zoho.com", "https://www.zohoapis.com"),
    "eu": ("https://accounts.zoho.eu", "https://www.zohoapis.eu"),
    "in": ("https://accounts.zoho.in", "https://www.zohoapis.in"),
    "au": ("https://accounts.zoho.com.au", "https://www.zohoapis.com.au"),
    "jp": ("https://accounts.zoho.jp", "https://www.zohoapis.jp"),
}
DEFAULT_REGION = "com"


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class ZohoSettings(BaseSettings):
    """Configuration required for talking to Zoho accounts and CRM."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(..., alias="ZOHO_CLIENT_ID")
    client_secret: str = Field(..., alias="ZOHO_CLIENT_SECRET")
    refresh_token: str = Field(..., alias="ZOHO_REFRESH_TOKEN")
    region: str = Field(
        DEFAULT_REGION,
        alias="ZOHO_REGION",
        description="Zoho datacenter code; unset means 'com'.",
    )
    accounts_domain_override: Optional[str] = Field(
        None,
        alias="ZOHO_ACCOUNTS_DOMAIN",
        description="Full accounts URL, takes precedence over the region.",
    )
    api_domain_override: Optional[str] = Field(
        None,
        alias="ZOHO_API_DOMAIN",
        description="Full CRM API URL, takes precedence over the region.",
    )
    module: str = Field("Contacts", alias="ZOHO_MODULE")
    lead_source: str = Field("Website", alias="ZOHO_LEAD_SOURCE")
    redirect_uri: Optional[str] = Field(
        None,
        alias="ZOHO_REDIRECT_URI",
        description="Redirect URI registered for the manual authorization flow.",
    )
    scope: str = Field("ZohoCRM.modules.ALL", alias="ZOHO_SCOPE")

    @field_validator("region", mode="before")
    @classmethod
    def _normalize_region(cls, value: Optional[str]) -> str:
        """Reject unknown datacenters instead of silently picking one."""
        region = (value or DEFAULT_REGION).strip().lower() or DEFAULT_REGION
        if region not in REGION_DOMAINS:
            known = ", ".join(sorted(REGION_DOMAINS))
            raise ValueError(f"Unknown Zoho region {value!r}; expected one of: {known}")
        return region

    @field_validator("lead_source")
    @classmethod
    def _require_lead_source(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ZOHO_LEAD_SOURCE must not be blank")
        return value.strip()

    @property
    def accounts_domain(self) -> str:
        if self.accounts_domain_override:
            return self.accounts_domain_override.rstrip("/")
        return REGION_DOMAINS[self.region][0]

    @property
    def api_domain(self) -> str:
        if self.api_domain_override:
            return self.api_domain_override.rstrip("/")
        return REGION_DOMAINS[self.region][1]

    def credential(self) -> RefreshCredential:
        """Return the long-lived refresh credential for token exchanges."""
        return RefreshCredential(
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=self.refresh_token,
            accounts_domain=self.accounts_domain,
        )


class BrevoSettings(BaseSettings):
    """Settings for the Brevo companion relay."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    api_key: Optional[str] = Field(
        None,
        alias="BREVO_API_KEY",
        description="Brevo API key; the Brevo relay is disabled when omitted.",
    )
    list_id: Optional[int] = Field(
        None,
        alias="BREVO_LIST_ID",
        description="Default list contacts are subscribed to.",
    )

    @field_validator("list_id", mode="before")
    @classmethod
    def _blank_list_id(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class HTTPSettings(BaseSettings):
    """Outbound HTTP behaviour shared by every upstream client."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    timeout_seconds: float = Field(10.0, alias="HTTP_TIMEOUT_SECONDS", gt=0)
    timeout_retries: int = Field(
        1,
        alias="HTTP_TIMEOUT_RETRIES",
        ge=0,
        description="Extra attempts after a timeout or connection failure.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the relay application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("production", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    port: int = Field(3000, alias="PORT")
    allowed_origin: Optional[str] = Field(
        None,
        alias="ALLOWED_ORIGIN",
        description="Single browser origin allowed by CORS; any origin when unset.",
    )
    rate_limit_per_minute: int = Field(30, alias="RATE_LIMIT_PER_MINUTE", gt=0)
    zoho: ZohoSettings = Field(default_factory=ZohoSettings)
    brevo: BrevoSettings = Field(default_factory=BrevoSettings)
    http: HTTPSettings = Field(default_factory=HTTPSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "BrevoSettings",
    "DEFAULT_REGION",
    "HTTPSettings",
    "REGION_DOMAINS",
    "ZohoSettings",
    "get_settings",
]
