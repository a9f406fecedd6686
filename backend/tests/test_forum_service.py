"""
Tests for forum posts, comments and likes.

Tests verify:
- Post creation validation and poll option generation
- Author-only edits
- Visibility of hidden/moderated posts for non-admins vs admins
- Comment and like counters
"""

import pytest

from shared.utils.exceptions import (
    ForbiddenError,
    NotFoundError,
    PostNotFoundError,
    ValidationError,
)
from shared.utils.schemas import PollOption
from rest_api.services.domain.forum_service import ForumService, parse_poll_end


@pytest.fixture
def service(db_session):
    return ForumService(db_session)


class TestParsePollEnd:

    def test_blank_and_invalid_mean_no_end(self):
        assert parse_poll_end(None) is None
        assert parse_poll_end("") is None
        assert parse_poll_end("next tuesday") is None

    def test_naive_is_utc(self):
        parsed = parse_poll_end("2030-01-01T10:00:00")
        assert parsed.tzinfo is not None
        assert parsed.hour == 10

    def test_z_suffix(self):
        assert parse_poll_end("2030-01-01T10:00:00Z").year == 2030


class TestCreatePost:

    def test_plain_post(self, service, student):
        post = service.create_post(student.id, "Hello forum", "general", title="Hi", tags=["intro"])

        assert post.author_id == student.id
        assert post.tags == ["intro"]
        assert post.has_poll is False
        assert post.likes_count == 0

    def test_string_options_get_indexed_ids(self, service, student):
        post = service.create_post(
            student.id,
            "Which city?",
            "uk_study",
            poll_question="City?",
            poll_options=["London", " ", "Leeds"],
        )

        assert post.has_poll is True
        assert post.poll_options == [
            {"id": "option_0", "text": "London"},
            {"id": "option_1", "text": "Leeds"},
        ]

    def test_option_objects_keep_their_ids(self, service, student):
        post = service.create_post(
            student.id,
            "Visa poll",
            "general",
            poll_question="Did you get your visa?",
            poll_options=[PollOption(id="1", text="Yes"), {"id": "2", "text": " No "}],
        )

        assert post.poll_options == [{"id": "1", "text": "Yes"}, {"id": "2", "text": "No"}]

    @pytest.mark.parametrize(
        "options",
        [
            [{"id": "1", "text": "Yes"}, {"id": "1", "text": "No"}],
            [{"id": " ", "text": "Yes"}, {"id": "2", "text": "No"}],
        ],
    )
    def test_bad_option_ids_are_rejected(self, service, student, options):
        with pytest.raises(ValidationError):
            service.create_post(student.id, "Poll", "general", poll_question="Q?", poll_options=options)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"content": ""},
            {"content": "x" * 10_001},
            {"category": "sports"},
            {"title": "t" * 501},
            {"poll_question": "Q?", "poll_options": ["only one"]},
            {"poll_question": None, "poll_options": ["a", "b"]},
            {"poll_question": "Q?", "poll_options": [str(i) for i in range(11)]},
        ],
    )
    def test_invalid_input(self, service, student, kwargs):
        values = {"content": "Valid", "category": "general"}
        values.update(kwargs)
        with pytest.raises(ValidationError):
            service.create_post(student.id, **values)


class TestUpdatePost:

    def test_author_edits(self, service, student):
        post = service.create_post(student.id, "Draft", "general")

        updated = service.update_post(post.id, student.id, content="Final")

        assert updated.content == "Final"
        assert updated.is_edited is True
        assert updated.edited_at is not None

    def test_other_user_cannot_edit(self, service, student, other_student):
        post = service.create_post(student.id, "Mine", "general")

        with pytest.raises(ForbiddenError):
            service.update_post(post.id, other_student.id, content="Yours now")

    def test_nothing_to_update(self, service, student):
        post = service.create_post(student.id, "Mine", "general")

        with pytest.raises(ValidationError):
            service.update_post(post.id, student.id)


class TestVisibility:

    def test_get_counts_views(self, service, student, other_student):
        post = service.create_post(student.id, "Hello", "general")

        service.get_post(post.id, other_student.id)
        output = service.get_post(post.id, other_student.id)

        assert output.views_count == 2
        assert output.moderation_state == "visible"

    def test_hidden_post_is_404_for_users_but_not_admins(self, db_session, service, student, admin):
        post = service.create_post(student.id, "Hello", "general")
        post.is_hidden_by_reports = True
        db_session.commit()

        with pytest.raises(PostNotFoundError):
            service.get_post(post.id, student.id)
        assert service.get_post(post.id, admin.id, is_admin=True).moderation_state == "hidden_by_reports"

    def test_listing_excludes_hidden_and_moderated(self, db_session, service, student, admin):
        visible = service.create_post(student.id, "One", "general")
        hidden = service.create_post(student.id, "Two", "general")
        moderated = service.create_post(student.id, "Three", "visa_tips")
        hidden.is_hidden_by_reports = True
        moderated.is_moderated = True
        db_session.commit()

        assert [p.id for p in service.list_posts(student.id)] == [visible.id]
        assert {p.id for p in service.list_posts(admin.id, is_admin=True)} == {
            visible.id,
            hidden.id,
            moderated.id,
        }

    def test_listing_filters_by_category(self, service, student):
        service.create_post(student.id, "One", "general")
        visa = service.create_post(student.id, "Two", "visa_tips")

        assert [p.id for p in service.list_posts(student.id, category="visa_tips")] == [visa.id]

    def test_listing_rejects_unknown_category(self, service, student):
        with pytest.raises(ValidationError):
            service.list_posts(student.id, category="sports")


class TestCommentsAndLikes:

    def test_comment_increments_counter(self, db_session, service, student, other_student):
        post = service.create_post(student.id, "Hello", "general")

        comment = service.create_comment(post.id, other_student.id, "Welcome!")
        service.create_comment(post.id, student.id, "Thanks", parent_id=comment.id)

        db_session.refresh(post)
        assert post.comments_count == 2
        assert [c.content for c in service.list_comments(post.id)] == ["Welcome!", "Thanks"]

    def test_comment_on_hidden_post(self, db_session, service, student):
        post = service.create_post(student.id, "Hello", "general")
        post.is_hidden_by_reports = True
        db_session.commit()

        with pytest.raises(PostNotFoundError):
            service.create_comment(post.id, student.id, "Hi")

    def test_reply_to_comment_of_another_post(self, service, student):
        first = service.create_post(student.id, "One", "general")
        second = service.create_post(student.id, "Two", "general")
        comment = service.create_comment(first.id, student.id, "On first")

        with pytest.raises(NotFoundError):
            service.create_comment(second.id, student.id, "Reply", parent_id=comment.id)

    def test_empty_comment(self, service, student):
        post = service.create_post(student.id, "Hello", "general")
        with pytest.raises(ValidationError):
            service.create_comment(post.id, student.id, "")

    def test_toggle_like(self, service, student, other_student):
        post = service.create_post(student.id, "Hello", "general")

        assert service.toggle_like(post.id, other_student.id) == (True, 1, [other_student.id])
        liked, count, liked_by = service.toggle_like(post.id, student.id)
        assert (liked, count, sorted(liked_by)) == (True, 2, sorted([student.id, other_student.id]))
        assert service.toggle_like(post.id, other_student.id) == (False, 1, [student.id])

    def test_listing_marks_liked_posts(self, service, student, other_student):
        post = service.create_post(student.id, "Hello", "general")
        service.toggle_like(post.id, other_student.id)

        (mine,) = service.list_posts(other_student.id)
        (theirs,) = service.list_posts(student.id)

        assert mine.is_liked is True
        assert theirs.is_liked is False
