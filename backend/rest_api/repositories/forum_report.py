"""
Forum Report Repository - Data access for post reports.
"""

from collections import defaultdict
from typing import Sequence

from sqlalchemy import delete, select

from rest_api.models import ForumPostReport
from .base import BaseRepository


class ForumReportRepository(BaseRepository[ForumPostReport]):
    """Repository for ForumPostReport entities."""

    @property
    def model(self) -> type[ForumPostReport]:
        return ForumPostReport

    def find_by_post_and_reporter(self, post_id: str, reporter_user_id: str) -> ForumPostReport | None:
        return self._db.scalar(
            select(ForumPostReport).where(
                ForumPostReport.post_id == post_id,
                ForumPostReport.reporter_user_id == reporter_user_id,
            )
        )

    def find_for_post(self, post_id: str) -> Sequence[ForumPostReport]:
        """Reports on a post, oldest first (the first reporter leads)."""
        return self._db.execute(
            select(ForumPostReport)
            .where(ForumPostReport.post_id == post_id)
            .order_by(ForumPostReport.created_at.asc(), ForumPostReport.id)
        ).scalars().unique().all()

    def find_for_posts(self, post_ids: list[str]) -> dict[str, list[ForumPostReport]]:
        """Bulk variant of find_for_post keyed by post ID."""
        if not post_ids:
            return {}

        reports = self._db.execute(
            select(ForumPostReport)
            .where(ForumPostReport.post_id.in_(post_ids))
            .order_by(ForumPostReport.created_at.asc(), ForumPostReport.id)
        ).scalars().unique().all()

        by_post: dict[str, list[ForumPostReport]] = defaultdict(list)
        for report in reports:
            by_post[report.post_id].append(report)
        return dict(by_post)

    def delete_for_post(self, post_id: str) -> int:
        """Delete every report on a post. Returns the number of rows removed."""
        result = self._db.execute(
            delete(ForumPostReport)
            .where(ForumPostReport.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
