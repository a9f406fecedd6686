"""
Notification Repository - Data access for in-app notifications.
"""

from typing import Sequence

from sqlalchemy import select

from rest_api.models import Notification
from .base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification entities."""

    @property
    def model(self) -> type[Notification]:
        return Notification

    def find_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[Notification]:
        """Newest first."""
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id).limit(limit)
        return self._db.execute(query).scalars().all()

    def count_unread(self, user_id: str) -> int:
        return self.count(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
