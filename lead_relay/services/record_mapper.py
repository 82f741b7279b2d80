"""
Translate free-form web form attributes into the Zoho CRM contact schema.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional

from lead_relay.models.contact import DESCRIPTION_FIELD, ContactRecord

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

ACCOUNT_PLACEHOLDER = "\u2014"
OVERFLOW_LABEL = "Additional fields:"

# Upper-cased attribute key -> canonical Zoho field. First match wins per key.
FIELD_ALIASES: Dict[str, str] = {
    "EMAIL": "Email",
    "FIRSTNAME": "First_Name",
    "FIRST_NAME": "First_Name",
    "GIVEN_NAME": "First_Name",
    "LASTNAME": "Last_Name",
    "LAST_NAME": "Last_Name",
    "SURNAME": "Last_Name",
    "FAMILY_NAME": "Last_Name",
    "COMPANY": "Account_Name",
    "COMPANY_NAME": "Account_Name",
    "ACCOUNT_NAME": "Account_Name",
    "ORGANIZATION": "Account_Name",
    "PHONE": "Phone",
    "TELEPHONE": "Phone",
    "SMS": "Phone",
    "MOBILE": "Mobile",
    "TITLE": "Title",
    "JOB_TITLE": "Title",
    "DEPARTMENT": "Department",
    "STREET": "Mailing_Street",
    "ADDRESS": "Mailing_Street",
    "CITY": "Mailing_City",
    "STATE": "Mailing_State",
    "PROVINCE": "Mailing_State",
    "ZIP": "Mailing_Zip",
    "ZIP_CODE": "Mailing_Zip",
    "POSTAL_CODE": "Mailing_Zip",
    "COUNTRY": "Mailing_Country",
    "LEAD_SOURCE": "Lead_Source",
    "SOURCE": "Lead_Source",
    "NOTE": DESCRIPTION_FIELD,
    "NOTES": DESCRIPTION_FIELD,
    "MESSAGE": DESCRIPTION_FIELD,
    "COMMENT": DESCRIPTION_FIELD,
    "COMMENTS": DESCRIPTION_FIELD,
    "DESCRIPTION": DESCRIPTION_FIELD,
}

# Keys consumed by the full-name split rather than mapped directly.
NAME_KEYS = frozenset({"NAME", "FULL_NAME", "FULLNAME"})


class SubmissionValidationError(ValueError):
    """Raised when an inbound submission is malformed."""


def validate_email(email: Any) -> str:
    if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email):
        raise SubmissionValidationError("Invalid email")
    return email


def validate_attributes(attributes: Any) -> Dict[str, Any]:
    if attributes is None:
        return {}
    if not isinstance(attributes, Mapping):
        raise SubmissionValidationError("attributes must be an object")
    return dict(attributes)


def validate_submission(email: Any, attributes: Any) -> tuple[str, Dict[str, Any]]:
    """Validate the shared envelope of every relay submission."""
    return validate_email(email), validate_attributes(attributes)


def reject_honeypot(honeypot: Any) -> None:
    """Refuse submissions where the hidden anti-bot field was filled."""
    if honeypot and str(honeypot).strip():
        raise SubmissionValidationError("Bad request")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class RecordMapper:
    """Builds :class:`ContactRecord` objects from submitted attribute bags."""

    def __init__(self, *, default_lead_source: str) -> None:
        self._default_lead_source = default_lead_source

    def build_record(self, primary_key: Any, attributes: Any) -> ContactRecord:
        email, attrs = validate_submission(primary_key, attributes)

        fields: Dict[str, Any] = {
            "Email": email,
            "Lead_Source": self._default_lead_source,
        }
        descriptions: list[str] = []
        overflow: Dict[str, Any] = {}
        full_name: Optional[tuple[str, Any]] = None

        for key, value in attrs.items():
            if value is None:
                continue
            alias = str(key).strip().upper()

            if alias in NAME_KEYS:
                if full_name is None and not _is_blank(value):
                    full_name = (key, value)
                else:
                    overflow[key] = value
                continue

            target = FIELD_ALIASES.get(alias)
            if target is None:
                overflow[key] = value
            elif target == DESCRIPTION_FIELD:
                if not _is_blank(value):
                    descriptions.append(str(value).strip())
            elif target == "Email":
                # The submitted email is the duplicate-check key and always wins.
                if _clean(value) != email:
                    overflow[key] = value
            elif not _is_blank(value):
                fields[target] = _clean(value)

        if full_name is not None:
            if "Last_Name" in fields:
                overflow[full_name[0]] = full_name[1]
            else:
                self._split_full_name(str(full_name[1]), fields)

        if _is_blank(fields.get("Account_Name")):
            fields["Account_Name"] = ACCOUNT_PLACEHOLDER

        if overflow:
            serialized = json.dumps(overflow, ensure_ascii=False, default=str)
            descriptions.append(f"{OVERFLOW_LABEL}\n{serialized}")

        if descriptions:
            fields[DESCRIPTION_FIELD] = "\n".join(descriptions)

        return ContactRecord(primary_key=email, mapped_fields=fields, overflow=overflow)

    @staticmethod
    def _split_full_name(name: str, fields: Dict[str, Any]) -> None:
        parts = name.split()
        if not parts:
            return
        first, rest = parts[0], " ".join(parts[1:])
        fields.setdefault("First_Name", first)
        fields["Last_Name"] = rest or first


__all__ = [
    "ACCOUNT_PLACEHOLDER",
    "ContactRecord",
    "FIELD_ALIASES",
    "OVERFLOW_LABEL",
    "RecordMapper",
    "SubmissionValidationError",
    "reject_honeypot",
    "validate_email",
    "validate_submission",
]
