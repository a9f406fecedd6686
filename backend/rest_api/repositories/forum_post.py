"""
Forum Post Repository - Data access for forum posts.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Select, select, update

from rest_api.models import ForumPost
from .base import BaseRepository, RepositoryFilters


@dataclass
class PostFilters(RepositoryFilters):
    """Filters specific to forum posts."""

    category: str | None = None
    author_id: str | None = None
    # Admins see hidden and moderated posts in listings
    include_moderated: bool = False


class ForumPostRepository(BaseRepository[ForumPost]):
    """Repository for ForumPost entities. Newest first by default."""

    @property
    def model(self) -> type[ForumPost]:
        return ForumPost

    def _base_query(self) -> Select:
        return select(ForumPost).order_by(ForumPost.created_at.desc(), ForumPost.id)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if not isinstance(filters, PostFilters):
            filters = PostFilters(**filters.__dict__)

        if filters.category:
            query = query.where(ForumPost.category == filters.category)

        if filters.author_id:
            query = query.where(ForumPost.author_id == filters.author_id)

        if not filters.include_moderated:
            query = query.where(
                ForumPost.is_hidden_by_reports.is_(False),
                ForumPost.is_moderated.is_(False),
            )

        return query

    def find_for_update(self, post_id: str) -> ForumPost | None:
        """
        Load a post for a read-modify-write counter update.
        Takes a row lock where the backend supports it (no-op on SQLite).
        """
        return self._db.scalar(
            select(ForumPost).where(ForumPost.id == post_id).with_for_update()
        )

    def find_hidden_by_reports(self) -> Sequence[ForumPost]:
        """Posts auto-hidden by reports and awaiting an admin decision, most recent first."""
        return self._db.execute(
            select(ForumPost)
            .where(
                ForumPost.is_hidden_by_reports.is_(True),
                ForumPost.is_moderated.is_(False),
            )
            .order_by(ForumPost.hidden_at.desc())
        ).scalars().unique().all()

    def increment_views(self, post_id: str) -> None:
        """Atomic increment; views are not part of any invariant."""
        self._db.execute(
            update(ForumPost)
            .where(ForumPost.id == post_id)
            .values(views_count=ForumPost.views_count + 1)
            .execution_options(synchronize_session=False)
        )
