"""
Domain models for contact submissions relayed to the CRM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DESCRIPTION_FIELD = "Description"


@dataclass(slots=True)
class ContactRecord:
    """A submission normalized to the Zoho schema, built fresh per request."""

    primary_key: str
    mapped_fields: Dict[str, Any] = field(default_factory=dict)
    overflow: Dict[str, Any] = field(default_factory=dict)

    @property
    def overflow_text(self) -> Optional[str]:
        return self.mapped_fields.get(DESCRIPTION_FIELD)

    def to_payload(self) -> Dict[str, Any]:
        return dict(self.mapped_fields)


@dataclass(slots=True)
class UpsertOutcome:
    """Result of relaying one record, returned to the HTTP caller."""

    succeeded: bool
    status_code: int
    action: Optional[str] = None
    detail: Any = None

    @classmethod
    def success(cls, action: str, detail: Any) -> "UpsertOutcome":
        return cls(succeeded=True, status_code=200, action=action, detail=detail)

    @classmethod
    def failure(cls, status_code: int, detail: Any) -> "UpsertOutcome":
        return cls(succeeded=False, status_code=int(status_code), detail=detail)


__all__ = ["ContactRecord", "DESCRIPTION_FIELD", "UpsertOutcome"]
