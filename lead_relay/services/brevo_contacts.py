"""Create-or-update relay for Brevo newsletter subscriptions."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from lead_relay.clients.brevo import BrevoClient, BrevoRequestError
from lead_relay.models.contact import UpsertOutcome

logger = logging.getLogger(__name__)


class BrevoContactService:
    """Subscribe a contact, falling back to an explicit update on duplicates."""

    def __init__(self, client: BrevoClient, default_list_id: Optional[int] = None) -> None:
        self._client = client
        self._default_list_id = default_list_id

    def pick_list_ids(self, requested: Optional[List[int]]) -> Optional[List[int]]:
        if requested:
            return list(requested)
        if self._default_list_id is not None:
            return [self._default_list_id]
        return None

    async def subscribe(
        self,
        email: str,
        attributes: Dict[str, Any],
        list_ids: Optional[List[int]] = None,
    ) -> UpsertOutcome:
        attributes = dict(attributes)
        if not attributes.get("EMAIL"):
            attributes["EMAIL"] = email
        targets = self.pick_list_ids(list_ids)

        try:
            await self._client.create_contact(email, attributes, targets)
        except BrevoRequestError as exc:
            if not exc.is_duplicate:
                logger.warning("Brevo create failed with HTTP %s", exc.status_code)
                return UpsertOutcome.failure(
                    exc.status_code or HTTPStatus.BAD_GATEWAY,
                    {"error": "Brevo create failed", "detail": exc.body},
                )
        else:
            return UpsertOutcome.success("created", {"ok": True})

        try:
            await self._client.update_contact(email, attributes, targets)
        except BrevoRequestError as exc:
            logger.warning("Brevo update failed with HTTP %s", exc.status_code)
            return UpsertOutcome.failure(
                HTTPStatus.BAD_GATEWAY,
                {"error": "Brevo update failed", "detail": exc.body},
            )
        return UpsertOutcome.success("updated", {"ok": True, "updated": True})


__all__ = ["BrevoContactService"]
