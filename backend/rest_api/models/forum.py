"""
Forum Models: posts, comments, likes, reports and poll votes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import ModerationState
from .base import Base, IdMixin, TimestampMixin, utc_now
from .user import User


class ForumPost(IdMixin, TimestampMixin, Base):
    """
    A community forum post, optionally carrying a poll.

    Moderation flags:
    - is_hidden_by_reports: set automatically once report_count reaches the
      hide threshold; only an admin restore clears it.
    - is_moderated: terminal admin decision; content is kept for audit.
    """

    __tablename__ = "forum_post"

    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=False, index=True
    )
    title: Mapped[Optional[str]] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Poll: options are stored as [{"id": ..., "text": ...}] only; tallies come from votes
    poll_question: Mapped[Optional[str]] = mapped_column(Text)
    poll_options: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    poll_ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Counters
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comments_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    views_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    report_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Editing
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Moderation
    is_hidden_by_reports: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    hidden_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_moderated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    moderator_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("app_user.id"))
    moderated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_forum_post_created_at", "created_at"),
    )

    author: Mapped[User] = relationship(foreign_keys=[author_id], lazy="joined")

    @property
    def has_poll(self) -> bool:
        return bool(self.poll_question and self.poll_options)

    @property
    def moderation_state(self) -> str:
        """Permanent moderation wins over the report-driven hidden flag."""
        if self.is_moderated:
            return ModerationState.PERMANENTLY_MODERATED
        if self.is_hidden_by_reports:
            return ModerationState.HIDDEN_BY_REPORTS
        return ModerationState.VISIBLE

    @property
    def is_publicly_visible(self) -> bool:
        return self.moderation_state == ModerationState.VISIBLE


class ForumComment(IdMixin, TimestampMixin, Base):
    """Comment on a forum post. parent_id allows one level of replies."""

    __tablename__ = "forum_comment"

    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("forum_post.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("app_user.id"), nullable=False)
    parent_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("forum_comment.id"))
    content: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped[User] = relationship(foreign_keys=[user_id], lazy="joined")


class ForumLike(IdMixin, Base):
    """A user's like on a post. One per (post, user)."""

    __tablename__ = "forum_like"

    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("forum_post.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("app_user.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_forum_like_post_user"),
    )


class ForumPostReport(IdMixin, Base):
    """
    A user's report against a post.

    At most one per (post, reporter); enforced by the moderation service's
    duplicate check so the caller gets a 409 instead of an integrity error.
    """

    __tablename__ = "forum_post_report"

    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("forum_post.id"), nullable=False, index=True
    )
    reporter_user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("app_user.id"), nullable=False, index=True
    )
    report_reason: Mapped[str] = mapped_column(String(32), nullable=False)
    report_details: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    reporter: Mapped[User] = relationship(foreign_keys=[reporter_user_id], lazy="joined")


class ForumPollVote(IdMixin, Base):
    """A user's vote on a post's poll. Voting again overwrites option_id."""

    __tablename__ = "forum_poll_vote"

    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("forum_post.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("app_user.id"), nullable=False)
    option_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_forum_poll_vote_post_user"),
    )
