"""
Notifications Router.

In-app notifications of the caller. Creation happens inside other flows
(chat, application status) and is pushed over the WebSocket there.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.config.constants import Limits
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context as current_user
from shared.utils.schemas import NotificationOutput, UnreadCountOutput
from rest_api.routers._common import get_user_id
from rest_api.services.domain import NotificationService


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOutput])
def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    limit: int = Query(default=50, ge=1, le=Limits.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> list[NotificationOutput]:
    """Newest first."""
    notifications = NotificationService(db).list_for_user(
        get_user_id(user),
        unread_only=unread_only,
        limit=limit,
    )
    return [NotificationOutput.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountOutput)
def unread_count(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> UnreadCountOutput:
    return UnreadCountOutput(count=NotificationService(db).unread_count(get_user_id(user)))


@router.post("/{notification_id}/read", response_model=NotificationOutput)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> NotificationOutput:
    notification = NotificationService(db).mark_as_read(notification_id, get_user_id(user))
    return NotificationOutput.model_validate(notification)


@router.post("/read-all", response_model=UnreadCountOutput)
def mark_all_read(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> UnreadCountOutput:
    """Mark every unread notification read. Returns how many were updated."""
    return UnreadCountOutput(count=NotificationService(db).mark_all_as_read(get_user_id(user)))
