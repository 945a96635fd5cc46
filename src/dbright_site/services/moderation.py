"""Moderation of stored contact messages."""

from __future__ import annotations

import logging

from dbright_site.models import MESSAGE_STATUSES, ContactMessage
from dbright_site.services.errors import StoreUnavailable, ValidationError
from dbright_site.services.store import MessageFilters, MessageStore

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = "all"
DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 500


def normalize_status_filter(status: str | None) -> str | None:
    """Map a listing status filter to a stored status, or None for all.

    Raises:
        ValidationError: The filter names an unknown status
    """
    if status is None or status == "" or status == STATUS_FILTER_ALL:
        return None
    if status not in MESSAGE_STATUSES:
        raise ValidationError("Invalid status filter")
    return status


class ModerationService:
    """Operator actions on messages: list, change status, delete.

    Status transitions are unrestricted between the three states; any row may
    be deleted regardless of its status.
    """

    def __init__(self, store: MessageStore) -> None:
        self.store = store

    def list_messages(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        limit: int | None = DEFAULT_LIST_LIMIT,
        offset: int = 0,
    ) -> list[ContactMessage]:
        """Return messages newest first, optionally filtered by status and text.

        A failed read is logged and returns an empty list so the console still
        renders.
        """
        if limit is not None and not 1 <= limit <= MAX_LIST_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIST_LIMIT}")
        if offset < 0:
            raise ValidationError("offset must not be negative")

        result = self.store.query(
            MessageFilters(
                status=normalize_status_filter(status),
                search=(search or "").strip() or None,
                limit=limit,
                offset=offset,
            )
        )
        if not result.success:
            logger.error("Message listing unavailable: %s", result.error)
            return []
        return result.data

    def set_status(self, message_id: int, status: str) -> bool:
        """Move a message to `status`.

        Returns:
            True if a row was changed, False if the id does not exist

        Raises:
            ValidationError: `status` is not one of the known values
            StoreUnavailable: The update failed
        """
        if status not in MESSAGE_STATUSES:
            raise ValidationError("Invalid status")
        result = self.store.update_status(message_id, status)
        if not result.success:
            raise StoreUnavailable()
        logger.info("Message %s marked %s", message_id, status)
        return result.data

    def delete(self, message_id: int) -> bool:
        """Delete a message; deleting a missing id succeeds without effect."""
        result = self.store.delete(message_id)
        if not result.success:
            raise StoreUnavailable()
        logger.info("Message %s deleted", message_id)
        return result.data
