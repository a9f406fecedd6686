"""
Forum Interaction Repository - Data access for likes and comments.
"""

from typing import Sequence

from sqlalchemy import func, select

from rest_api.models import ForumComment, ForumLike
from .base import BaseRepository


class ForumLikeRepository(BaseRepository[ForumLike]):
    """Repository for ForumLike entities."""

    @property
    def model(self) -> type[ForumLike]:
        return ForumLike

    def find_like(self, post_id: str, user_id: str) -> ForumLike | None:
        return self._db.scalar(
            select(ForumLike).where(
                ForumLike.post_id == post_id,
                ForumLike.user_id == user_id,
            )
        )

    def count_for_post(self, post_id: str) -> int:
        return self.count(ForumLike.post_id == post_id)

    def liked_by(self, post_id: str) -> list[str]:
        """User IDs that currently like the post, oldest like first."""
        return list(
            self._db.scalars(
                select(ForumLike.user_id)
                .where(ForumLike.post_id == post_id)
                .order_by(ForumLike.created_at.asc(), ForumLike.id)
            ).all()
        )

    def liked_post_ids(self, post_ids: list[str], user_id: str) -> set[str]:
        """Which of the given posts the user has liked."""
        if not post_ids:
            return set()
        return set(
            self._db.scalars(
                select(ForumLike.post_id).where(
                    ForumLike.user_id == user_id,
                    ForumLike.post_id.in_(post_ids),
                )
            ).all()
        )


class ForumCommentRepository(BaseRepository[ForumComment]):
    """Repository for ForumComment entities."""

    @property
    def model(self) -> type[ForumComment]:
        return ForumComment

    def find_for_post(self, post_id: str) -> Sequence[ForumComment]:
        """Comments on a post in conversation order."""
        return self._db.execute(
            select(ForumComment)
            .where(ForumComment.post_id == post_id)
            .order_by(ForumComment.created_at.asc(), ForumComment.id)
        ).scalars().unique().all()

    def count_for_post(self, post_id: str) -> int:
        return self._db.scalar(
            select(func.count()).select_from(ForumComment).where(ForumComment.post_id == post_id)
        ) or 0
