"""
User Model.

Only the columns the forum, chat and notification flows read. Password and
account-lifecycle columns belong to the identity service.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import Roles
from .base import Base, IdMixin, TimestampMixin


class User(IdMixin, TimestampMixin, Base):
    """
    A student, counselor or admin.
    Students may have an assigned counselor, which is who they can chat with.
    """

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Roles.STUDENT)
    assigned_counselor_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=True, index=True
    )

    @property
    def display_name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.email

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
