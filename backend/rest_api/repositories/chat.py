"""
Chat Repository - Data access for student/counselor messages.
"""

from typing import Sequence

from sqlalchemy import select

from rest_api.models import ChatMessage
from .base import BaseRepository


class ChatMessageRepository(BaseRepository[ChatMessage]):
    """Repository for ChatMessage entities."""

    @property
    def model(self) -> type[ChatMessage]:
        return ChatMessage

    def find_conversation(
        self,
        student_id: str,
        counselor_id: str,
        limit: int = 100,
    ) -> Sequence[ChatMessage]:
        """Most recent non-deleted messages of a conversation, returned oldest first."""
        recent = self._db.execute(
            select(ChatMessage)
            .where(
                ChatMessage.student_id == student_id,
                ChatMessage.counselor_id == counselor_id,
                ChatMessage.is_deleted.is_(False),
            )
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        ).scalars().all()
        return list(reversed(recent))

    def count_unread_for(self, user_id: str) -> int:
        """Unread messages addressed to the user."""
        return self.count(
            ChatMessage.is_read.is_(False),
            ChatMessage.is_deleted.is_(False),
            ChatMessage.sender_id != user_id,
            (ChatMessage.student_id == user_id) | (ChatMessage.counselor_id == user_id),
        )
