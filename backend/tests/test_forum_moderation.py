"""
Tests for forum reporting and moderation.

Tests verify:
- One report per user per post (409 on the second)
- Auto-hide at the third report, not the second
- Restore resets the counter, deletes reports and allows re-reporting
- Permanent moderation from any state, and restore does not undo it
- Admin reads of reported posts
"""

import pytest
from sqlalchemy import func, select

from shared.config.constants import ModerationState
from shared.utils.exceptions import ConflictError, PostNotFoundError, ValidationError
from rest_api.models import ForumPost, ForumPostReport
from rest_api.services.domain.forum_moderation_service import ForumModerationService


@pytest.fixture
def post(db_session, student):
    post = ForumPost(author_id=student.id, content="Cheap essays here", category="general")
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def service(db_session):
    return ForumModerationService(db_session, hide_threshold=3)


def _report_count_rows(db_session, post_id):
    return db_session.scalar(
        select(func.count()).select_from(ForumPostReport).where(ForumPostReport.post_id == post_id)
    )


class TestReportPost:
    """ForumModerationService.report_post."""

    def test_first_report(self, service, post, make_users):
        (reporter,) = make_users(1)

        outcome = service.report_post(post.id, reporter.id, "spam", "Advertising")

        assert outcome.current_report_count == 1
        assert outcome.was_auto_hidden is False
        assert outcome.report.report_reason == "spam"
        assert outcome.report.report_details == "Advertising"

    def test_duplicate_report_conflicts(self, db_session, service, post, make_users):
        (reporter,) = make_users(1)
        service.report_post(post.id, reporter.id, "spam")

        with pytest.raises(ConflictError) as exc:
            service.report_post(post.id, reporter.id, "harassment")

        assert exc.value.status_code == 409
        assert exc.value.detail == "You have already reported this post"
        db_session.refresh(post)
        assert post.report_count == 1
        assert _report_count_rows(db_session, post.id) == 1

    def test_two_reports_do_not_hide(self, db_session, service, post, make_users):
        for reporter in make_users(2):
            outcome = service.report_post(post.id, reporter.id, "spam")

        assert outcome.was_auto_hidden is False
        db_session.refresh(post)
        assert post.moderation_state == ModerationState.VISIBLE

    def test_third_report_hides(self, db_session, service, post, make_users):
        outcomes = [service.report_post(post.id, r.id, "spam") for r in make_users(3)]

        assert [o.was_auto_hidden for o in outcomes] == [False, False, True]
        assert outcomes[-1].current_report_count == 3
        db_session.refresh(post)
        assert post.is_hidden_by_reports is True
        assert post.hidden_at is not None
        assert post.moderation_state == ModerationState.HIDDEN_BY_REPORTS

    def test_fourth_report_does_not_rehide(self, service, post, make_users):
        reporters = make_users(4)
        for reporter in reporters[:3]:
            service.report_post(post.id, reporter.id, "spam")

        outcome = service.report_post(post.id, reporters[3].id, "spam")

        assert outcome.current_report_count == 4
        assert outcome.was_auto_hidden is False

    def test_invalid_reason(self, service, post, student):
        with pytest.raises(ValidationError):
            service.report_post(post.id, student.id, "boring")

    def test_details_too_long(self, service, post, student):
        with pytest.raises(ValidationError):
            service.report_post(post.id, student.id, "other", "x" * 1001)

    def test_missing_post(self, service, student):
        with pytest.raises(PostNotFoundError):
            service.report_post("missing", student.id, "spam")


class TestRestoreAndModerate:
    """Admin transitions."""

    def _hide(self, service, post, make_users):
        reporters = make_users(3)
        for reporter in reporters:
            service.report_post(post.id, reporter.id, "spam")
        return reporters

    def test_restore_resets_everything(self, db_session, service, post, make_users, admin):
        self._hide(service, post, make_users)

        restored = service.restore_post(post.id, admin.id)

        assert restored.report_count == 0
        assert restored.is_hidden_by_reports is False
        assert restored.hidden_at is None
        assert restored.moderation_state == ModerationState.VISIBLE
        assert _report_count_rows(db_session, post.id) == 0

    def test_restored_post_can_be_reported_again(self, service, post, make_users, admin):
        reporters = self._hide(service, post, make_users)
        service.restore_post(post.id, admin.id)

        outcome = service.report_post(post.id, reporters[0].id, "spam")

        assert outcome.current_report_count == 1

    def test_moderate_hidden_post(self, service, post, make_users, admin):
        self._hide(service, post, make_users)

        moderated = service.moderate_post(post.id, admin.id)

        assert moderated.moderation_state == ModerationState.PERMANENTLY_MODERATED
        assert moderated.moderator_id == admin.id
        assert moderated.moderated_at is not None
        assert moderated.content == "Cheap essays here"

    def test_moderate_visible_post(self, service, post, admin):
        assert service.moderate_post(post.id, admin.id).is_moderated is True

    def test_restore_does_not_undo_moderation(self, service, post, admin):
        service.moderate_post(post.id, admin.id)

        restored = service.restore_post(post.id, admin.id)

        assert restored.moderation_state == ModerationState.PERMANENTLY_MODERATED

    def test_moderated_post_still_accepts_reports_without_state_change(self, service, post, make_users, admin):
        service.moderate_post(post.id, admin.id)
        outcomes = [service.report_post(post.id, r.id, "spam") for r in make_users(3)]
        assert not any(o.was_auto_hidden for o in outcomes)

    def test_missing_post(self, service, admin):
        with pytest.raises(PostNotFoundError):
            service.restore_post("missing", admin.id)
        with pytest.raises(PostNotFoundError):
            service.moderate_post("missing", admin.id)


class TestAdminReads:

    def test_reported_posts_lists_hidden_only(self, db_session, service, post, make_users, student):
        visible = ForumPost(author_id=student.id, content="Fine", category="general")
        db_session.add(visible)
        db_session.commit()
        reporters = make_users(3)
        for reporter in reporters:
            service.report_post(post.id, reporter.id, "spam")
        service.report_post(visible.id, reporters[0].id, "spam")

        reported = service.get_reported_posts()

        assert [r.post.id for r in reported] == [post.id]
        assert len(reported[0].reports) == 3
        assert reported[0].first_reporter.id == reporters[0].id

    def test_report_details(self, service, post, make_users):
        (reporter,) = make_users(1)
        service.report_post(post.id, reporter.id, "harassment", "Rude")

        details = service.get_report_details(post.id)

        assert details.post.id == post.id
        assert [r.report_details for r in details.reports] == ["Rude"]
