# src/dbright_site/api/endpoints/contact.py
"""Public contact and booking form endpoint."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, status

from dbright_site.api.dependencies import IntakeServiceDep, NotifierDep, RequestOriginDep
from dbright_site.schemas.contact import ContactAck, ContactSubmission
from dbright_site.services.intake import ACK_MESSAGE

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=ContactAck, status_code=status.HTTP_200_OK)
def submit_contact_form(
    submission: ContactSubmission,
    origin: RequestOriginDep,
    intake: IntakeServiceDep,
    notifier: NotifierDep,
    background_tasks: BackgroundTasks,
) -> ContactAck:
    """Store a contact or booking submission.

    The response never includes the stored id. Staff notification mail, when
    enabled, is sent after the response.
    """
    summary = intake.submit(submission, origin)
    if notifier.enabled:
        background_tasks.add_task(notifier.notify, summary)
    return ContactAck(success=True, message=ACK_MESSAGE)
