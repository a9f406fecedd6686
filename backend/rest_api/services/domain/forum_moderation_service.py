"""
Forum Moderation Domain Service.

Report-driven moderation of forum posts:

    visible --(reports reach threshold)--> hidden_by_reports
    hidden_by_reports --(admin restore)--> visible
    any state --(admin permanent moderation)--> permanently_moderated

Every transition runs in a single transaction, so a failed step leaves the
post, its counter and its reports untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.orm import Session

from shared.config.constants import Limits, ModerationState, ReportReason
from shared.config.logging import audit_moderation_event, get_logger
from shared.config.settings import settings
from shared.infrastructure.db import transaction
from shared.utils.exceptions import ConflictError, PostNotFoundError, ValidationError
from rest_api.models import ForumPost, ForumPostReport, utc_now
from rest_api.repositories import ForumPostRepository, ForumReportRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ReportOutcome:
    """What a report did to the post."""

    report: ForumPostReport
    current_report_count: int
    was_auto_hidden: bool


@dataclass(frozen=True, slots=True)
class ReportedPost:
    """A hidden post together with the reports that hid it."""

    post: ForumPost
    reports: Sequence[ForumPostReport]

    @property
    def first_reporter(self):
        return self.reports[0].reporter if self.reports else None


def moderation_state(post: ForumPost) -> str:
    """Derive the moderation state from the post's flags."""
    return post.moderation_state


class ForumModerationService:
    """Domain service for reporting and moderating forum posts."""

    def __init__(self, db: Session, hide_threshold: int | None = None):
        self._db = db
        self._posts = ForumPostRepository(db)
        self._reports = ForumReportRepository(db)
        self._hide_threshold = hide_threshold or settings.forum_report_hide_threshold

    @property
    def hide_threshold(self) -> int:
        return self._hide_threshold

    def report_post(
        self,
        post_id: str,
        reporter_user_id: str,
        reason: str,
        details: str | None = None,
    ) -> ReportOutcome:
        """
        File a report and auto-hide the post once it has enough of them.

        Raises:
            ValidationError: Unknown reason or details too long.
            ConflictError: The user already reported this post.
            PostNotFoundError: No such post.
        """
        if reason not in ReportReason.ALL:
            raise ValidationError(
                f"Invalid report reason '{reason}'",
                post_id=post_id,
                reason=reason,
            )
        if details is not None and len(details) > Limits.MAX_REPORT_DETAILS_LENGTH:
            raise ValidationError(
                f"Report details must be at most {Limits.MAX_REPORT_DETAILS_LENGTH} characters",
                post_id=post_id,
            )

        with transaction(self._db):
            if self._reports.find_by_post_and_reporter(post_id, reporter_user_id):
                raise ConflictError(
                    "You have already reported this post",
                    post_id=post_id,
                    reporter_user_id=reporter_user_id,
                )

            post = self._posts.find_for_update(post_id)
            if post is None:
                raise PostNotFoundError(post_id)

            report = self._reports.create(
                post_id=post_id,
                reporter_user_id=reporter_user_id,
                report_reason=reason,
                report_details=details or None,
            )

            new_count = (post.report_count or 0) + 1
            post.report_count = new_count

            was_auto_hidden = False
            if (
                new_count >= self._hide_threshold
                and moderation_state(post) == ModerationState.VISIBLE
            ):
                post.is_hidden_by_reports = True
                post.hidden_at = utc_now()
                was_auto_hidden = True

            self._db.flush()

        logger.info(
            "Forum post reported",
            post_id=post_id,
            reporter_user_id=reporter_user_id,
            reason=reason,
            report_count=new_count,
            auto_hidden=was_auto_hidden,
        )
        if was_auto_hidden:
            audit_moderation_event("AUTO_HIDDEN", post_id, report_count=new_count)

        return ReportOutcome(
            report=report,
            current_report_count=new_count,
            was_auto_hidden=was_auto_hidden,
        )

    def restore_post(self, post_id: str, admin_id: str) -> ForumPost:
        """
        Clear the report state of a post: counter to zero, hidden flag off,
        every report deleted so the same users may report it again.

        Permanent moderation is not undone by a restore.
        """
        with transaction(self._db):
            post = self._posts.find_for_update(post_id)
            if post is None:
                raise PostNotFoundError(post_id)

            previous_state = moderation_state(post)
            removed = self._reports.delete_for_post(post_id)

            post.is_hidden_by_reports = False
            post.report_count = 0
            post.hidden_at = None
            self._db.flush()

        self._db.refresh(post)
        audit_moderation_event(
            "RESTORED",
            post_id,
            actor_id=admin_id,
            previous_state=previous_state,
            reports_removed=removed,
        )
        return post

    def moderate_post(self, post_id: str, admin_id: str) -> ForumPost:
        """
        Permanently moderate a post. Content, comments and reports are kept
        for audit; the post simply stops being served to non-admins.
        """
        with transaction(self._db):
            post = self._posts.find_for_update(post_id)
            if post is None:
                raise PostNotFoundError(post_id)

            previous_state = moderation_state(post)
            post.is_moderated = True
            post.moderator_id = admin_id
            post.moderated_at = utc_now()
            self._db.flush()

        self._db.refresh(post)
        audit_moderation_event(
            "MODERATED",
            post_id,
            actor_id=admin_id,
            previous_state=previous_state,
        )
        return post

    def get_reported_posts(self) -> list[ReportedPost]:
        """Posts hidden by reports, each with its reports (first reporter first)."""
        posts = self._posts.find_hidden_by_reports()
        reports_by_post = self._reports.find_for_posts([post.id for post in posts])
        return [
            ReportedPost(post=post, reports=reports_by_post.get(post.id, []))
            for post in posts
        ]

    def get_report_details(self, post_id: str) -> ReportedPost:
        post = self._posts.find_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return ReportedPost(post=post, reports=self._reports.find_for_post(post_id))
