"""
Notification Domain Service.

Creates, lists and marks in-app notifications. Pushing a created
notification to the user's sockets is the router's job (NotificationHandler
scheduled as a background task), so creation never waits on delivery.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.orm import Session

from shared.config.constants import Limits, NotificationType
from shared.config.logging import get_logger
from shared.infrastructure.db import transaction
from shared.utils.exceptions import ForbiddenError, NotFoundError, ValidationError
from rest_api.models import Notification, utc_now
from rest_api.repositories import NotificationRepository

logger = get_logger(__name__)


class NotificationService:
    """Domain service for Notification operations."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = NotificationRepository(db)

    @staticmethod
    def validate(notification_type: str, title: str, message: str) -> None:
        if notification_type not in NotificationType.ALL:
            raise ValidationError(f"Invalid notification type '{notification_type}'")
        if not title or len(title) > Limits.MAX_NOTIFICATION_TITLE_LENGTH:
            raise ValidationError(
                f"Title must be 1-{Limits.MAX_NOTIFICATION_TITLE_LENGTH} characters"
            )
        if not message or len(message) > Limits.MAX_NOTIFICATION_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message must be 1-{Limits.MAX_NOTIFICATION_MESSAGE_LENGTH} characters"
            )

    def add_notification(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Validate and stage a notification in the caller's transaction (flush, no commit)."""
        self.validate(notification_type, title, message)
        return self._repo.create(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            data=data,
        )

    def create_notification(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Create and commit a notification."""
        with transaction(self._db):
            notification = self.add_notification(user_id, notification_type, title, message, data)
        self._db.refresh(notification)
        logger.info(
            "Notification created",
            notification_id=notification.id,
            user_id=user_id,
            type=notification_type,
        )
        return notification

    # =========================================================================
    # Helper creators
    # =========================================================================

    def notify_application_update(
        self,
        user_id: str,
        application_id: str,
        university_name: str,
        status: str,
    ) -> Notification:
        readable = status.replace("_", " ")
        return self.create_notification(
            user_id,
            NotificationType.APPLICATION_UPDATE,
            "Application status updated",
            f"Your application to {university_name} is now {readable}.",
            {"applicationId": application_id, "status": status},
        )

    def notify_new_message(self, user_id: str, sender_name: str, message_id: str) -> Notification:
        return self.create_notification(
            user_id,
            NotificationType.MESSAGE,
            "New message",
            f"You have a new message from {sender_name}.",
            {"messageId": message_id},
        )

    def notify_system_update(self, user_id: str, title: str, message: str) -> Notification:
        return self.create_notification(user_id, NotificationType.SYSTEM, title, message)

    def notify_document_reminder(self, user_id: str, document_type: str) -> Notification:
        return self.create_notification(
            user_id,
            NotificationType.DOCUMENT_REMINDER,
            "Document reminder",
            f"Please upload your {document_type}.",
            {"documentType": document_type},
        )

    def notify_deadline_approaching(self, user_id: str, what: str, days_left: int) -> Notification:
        unit = "day" if days_left == 1 else "days"
        return self.create_notification(
            user_id,
            NotificationType.DEADLINE,
            "Deadline approaching",
            f"{what} is due in {days_left} {unit}.",
            {"daysLeft": days_left},
        )

    # =========================================================================
    # Reads and read-state
    # =========================================================================

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        return self._repo.find_for_user(user_id, unread_only=unread_only, limit=limit)

    def unread_count(self, user_id: str) -> int:
        return self._repo.count_unread(user_id)

    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        """Mark one of the user's notifications read. Already-read rows keep their read_at."""
        notification = self._repo.find_by_id(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if notification.user_id != user_id:
            raise ForbiddenError("read this notification", notification_id=notification_id)

        if not notification.is_read:
            with transaction(self._db):
                self._repo.update(notification, is_read=True, read_at=utc_now())
            self._db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: str) -> int:
        unread = self._repo.find_for_user(user_id, unread_only=True, limit=Limits.MAX_PAGE_SIZE * 10)
        now = utc_now()
        with transaction(self._db):
            for notification in unread:
                notification.is_read = True
                notification.read_at = now
        return len(unread)
