"""
Chat Model: student/counselor direct messages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdMixin, TimestampMixin


class ChatMessage(IdMixin, TimestampMixin, Base):
    """
    One message in the conversation between a student and their counselor.
    sender_id is always one of student_id / counselor_id.
    """

    __tablename__ = "chat_message"

    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("app_user.id"), nullable=False)
    counselor_id: Mapped[str] = mapped_column(String(36), ForeignKey("app_user.id"), nullable=False)
    sender_id: Mapped[str] = mapped_column(String(36), ForeignKey("app_user.id"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_chat_message_conversation", "student_id", "counselor_id", "created_at"),
    )

    @property
    def recipient_id(self) -> str:
        return self.counselor_id if self.sender_id == self.student_id else self.student_id
