# src/dbright_site/api/endpoints/admin_messages.py
"""Operator moderation endpoints for stored messages."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from dbright_site.api.dependencies import CurrentSessionDep, ModerationServiceDep
from dbright_site.schemas.admin import (
    ActionResponse,
    MessageListResponse,
    MessageResponse,
    StatusUpdateRequest,
)
from dbright_site.services.moderation import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT

router = APIRouter(prefix="/admin", tags=["admin", "messages"])


@router.get("/messages", response_model=MessageListResponse)
def list_messages(
    session: CurrentSessionDep,
    moderation: ModerationServiceDep,
    message_status: str | None = Query(None, alias="status"),
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    search: str | None = Query(None),
) -> MessageListResponse:
    """List messages newest first, filtered by status and free text."""
    messages = moderation.list_messages(
        status=message_status,
        search=search,
        limit=limit,
        offset=offset,
    )
    return MessageListResponse(
        success=True,
        messages=[MessageResponse.model_validate(message) for message in messages],
        count=len(messages),
    )


@router.patch("/messages", response_model=ActionResponse)
def update_message_status(
    session: CurrentSessionDep,
    payload: StatusUpdateRequest,
    moderation: ModerationServiceDep,
) -> ActionResponse:
    """Move a message to another status; unknown ids succeed without effect."""
    moderation.set_status(payload.id, payload.status)
    return ActionResponse(success=True, message="Message updated successfully")


@router.delete("/messages", response_model=ActionResponse)
def delete_message(
    session: CurrentSessionDep,
    moderation: ModerationServiceDep,
    message_id: str | None = Query(None, alias="id"),
) -> ActionResponse:
    """Delete a message; deleting an unknown id succeeds without effect."""
    if not message_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message ID is required",
        )
    try:
        parsed_id = int(message_id)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message ID must be an integer",
        ) from err

    moderation.delete(parsed_id)
    return ActionResponse(success=True, message="Message deleted successfully")
