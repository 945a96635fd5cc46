"""Intake of public contact and booking submissions."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dbright_site.schemas.contact import ContactSubmission
from dbright_site.services.errors import StoreUnavailable, ValidationError
from dbright_site.services.notifications import SubmissionSummary
from dbright_site.services.store import MessageStore, NewMessage

logger = logging.getLogger(__name__)

ACK_MESSAGE = "Thank you for your message. We will get back to you soon."
USER_AGENT_MAX_LENGTH = 1000


@dataclass(frozen=True)
class RequestOrigin:
    """Best-effort metadata about where a submission came from."""

    ip_address: str | None = None
    user_agent: str | None = None


class IntakeService:
    """Validates and persists untrusted public submissions."""

    def __init__(self, store: MessageStore) -> None:
        self.store = store

    def submit(self, submission: ContactSubmission, origin: RequestOrigin) -> SubmissionSummary:
        """Store a submission with status `unread`.

        Returns:
            Summary of what was stored, for follow-up notification mail

        Raises:
            ValidationError: Name or email is missing
            StoreUnavailable: The row could not be written
        """
        if not submission.name.strip() or not submission.email.strip():
            raise ValidationError("Name and email are required")

        user_agent = origin.user_agent
        if user_agent:
            user_agent = user_agent[:USER_AGENT_MAX_LENGTH]

        result = self.store.insert(
            NewMessage(
                name=submission.name,
                email=submission.email,
                phone=submission.phone,
                service=submission.subject,
                company=submission.company,
                preferred_date=submission.date,
                preferred_time=submission.time,
                message=submission.message,
                ip_address=(origin.ip_address or "")[:50] or None,
                user_agent=user_agent,
            )
        )
        if not result.success or result.data is None:
            logger.error("Contact submission could not be stored: %s", result.error)
            raise StoreUnavailable()

        logger.info("Stored contact message %s", result.data["id"])
        return SubmissionSummary(
            name=submission.name,
            email=submission.email,
            phone=submission.phone,
            company=submission.company,
            service=submission.subject,
            preferred_date=submission.date,
            preferred_time=submission.time,
            message=submission.message,
        )
