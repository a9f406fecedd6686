"""
Application Model: a student's application to a university program.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import ApplicationStatus
from .base import Base, IdMixin, TimestampMixin


class Application(IdMixin, TimestampMixin, Base):
    __tablename__ = "application"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=False, index=True
    )
    university_name: Mapped[str] = mapped_column(Text, nullable=False)
    program: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApplicationStatus.DRAFT
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)
