"""
Pydantic models for inbound relay submissions and their responses.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContactSubmission(BaseModel):
    """Web form payload relayed to Zoho CRM."""

    model_config = ConfigDict(extra="ignore")

    email: Any = Field(None, description="Primary identifier of the contact.")
    attributes: Any = Field(
        None,
        description="Flat key/value bag of form fields; unknown keys are kept.",
    )
    honeypot: Any = Field(
        None, description="Hidden anti-bot field; must be left empty."
    )


class BrevoSubscription(BaseModel):
    """Web form payload relayed to Brevo."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: Any = Field(None, description="Contact email address.")
    attributes: Any = Field(None, description="Brevo contact attributes.")
    list_ids: Optional[List[int]] = Field(
        None,
        alias="listIds",
        description="Target lists; falls back to the configured default list.",
    )
    honeypot: Any = Field(None, description="Hidden anti-bot field.")


class ContactUpsertResponse(BaseModel):
    """Successful Zoho relay response."""

    ok: bool = True
    action: str = Field(..., description="Action reported by Zoho (insert/update).")
    zoho: Any = Field(None, description="Per-record detail returned by Zoho.")


class RelayErrorResponse(BaseModel):
    """Error envelope shared by every relay endpoint."""

    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    ts: str


__all__ = [
    "BrevoSubscription",
    "ContactSubmission",
    "ContactUpsertResponse",
    "HealthResponse",
    "RelayErrorResponse",
]
