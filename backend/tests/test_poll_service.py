"""
Tests for the poll/vote aggregator.

Tests verify:
- Half-up percentage rounding, 0 for an empty poll
- Vote upsert keeps one row per user with the latest option
- Vote rejection (unknown option, no poll, closed poll, hidden post)
- Privacy rule: non-voters see options only, voters and admins see results
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from shared.utils.exceptions import PostNotFoundError, ValidationError
from rest_api.models import ForumPollVote, ForumPost, utc_now
from rest_api.services.domain.poll_service import PollService, build_results, percentage


OPTIONS = [{"id": "1", "text": "Yes"}, {"id": "2", "text": "No"}]


@pytest.fixture
def make_post(db_session, counselor):
    def _make(**overrides):
        values = {
            "author_id": counselor.id,
            "content": "Should I apply early?",
            "category": "general",
            "poll_question": "Apply early?",
            "poll_options": OPTIONS,
        }
        values.update(overrides)
        post = ForumPost(**values)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post
    return _make


class TestPercentage:
    """Rounding of per-option shares."""

    @pytest.mark.parametrize(
        "votes,total,expected",
        [
            (0, 0, 0),
            (1, 1, 100),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),  # 12.5 rounds up
            (1, 6, 17),
            (0, 5, 0),
        ],
    )
    def test_half_up(self, votes, total, expected):
        assert percentage(votes, total) == expected

    def test_three_equal_options_are_not_normalised(self):
        options = [{"id": str(i), "text": str(i)} for i in range(3)]
        results = build_results("Q", options, {"a": "0", "b": "1", "c": "2"})

        assert [o["percentage"] for o in results.options] == [33, 33, 33]
        assert results.total_votes == 3

    def test_votes_for_unknown_options_are_ignored(self):
        results = build_results("Q", OPTIONS, {"a": "1", "b": "gone"})
        assert results.total_votes == 1


class TestVote:
    """PollService.vote."""

    def test_first_vote(self, db_session, make_post, student):
        post = make_post()

        outcome = PollService(db_session).vote(post.id, student.id, "1")

        assert outcome.user_votes == ["1"]
        assert outcome.results.total_votes == 1
        assert outcome.results.options[0]["votes"] == 1
        assert outcome.results.options[0]["percentage"] == 100

    def test_revote_overwrites(self, db_session, make_post, student):
        post = make_post()
        service = PollService(db_session)

        service.vote(post.id, student.id, "1")
        outcome = service.vote(post.id, student.id, "2")

        rows = db_session.execute(
            select(ForumPollVote).where(ForumPollVote.post_id == post.id)
        ).scalars().all()
        assert len(rows) == 1
        assert rows[0].option_id == "2"
        assert outcome.results.total_votes == 1
        assert [o["votes"] for o in outcome.results.options] == [0, 1]

    def test_unknown_option(self, db_session, make_post, student):
        post = make_post()

        with pytest.raises(ValidationError) as exc:
            PollService(db_session).vote(post.id, student.id, "99")

        assert exc.value.detail == "Invalid poll option"
        count = db_session.scalar(select(func.count()).select_from(ForumPollVote))
        assert count == 0

    def test_post_without_poll(self, db_session, make_post, student):
        post = make_post(poll_question=None, poll_options=None)

        with pytest.raises(ValidationError):
            PollService(db_session).vote(post.id, student.id, "1")

    def test_closed_poll(self, db_session, make_post, student):
        post = make_post(poll_ends_at=utc_now() - timedelta(minutes=1))

        with pytest.raises(ValidationError) as exc:
            PollService(db_session).vote(post.id, student.id, "1")
        assert exc.value.detail == "This poll has ended"

    def test_open_poll_with_future_end(self, db_session, make_post, student):
        post = make_post(poll_ends_at=utc_now() + timedelta(days=1))
        assert PollService(db_session).vote(post.id, student.id, "2").user_votes == ["2"]

    def test_hidden_post(self, db_session, make_post, student):
        post = make_post(is_hidden_by_reports=True)

        with pytest.raises(PostNotFoundError):
            PollService(db_session).vote(post.id, student.id, "1")

    def test_missing_post(self, db_session, student):
        with pytest.raises(PostNotFoundError):
            PollService(db_session).vote("missing", student.id, "1")


class TestPrivacy:
    """What each viewer may see."""

    def test_non_voter_sees_options_only(self, db_session, make_post, student, other_student):
        post = make_post()
        service = PollService(db_session)
        service.vote(post.id, student.id, "1")

        view = service.view(post.id, other_student.id)

        assert view["showResults"] is False
        assert view["pollOptions"] == OPTIONS
        assert view["userVotes"] == []
        assert view["totalVotes"] is None

    def test_results_for_non_voter_drop_counts(self, db_session, make_post, student, other_student):
        post = make_post()
        service = PollService(db_session)
        service.vote(post.id, student.id, "1")

        snapshot = service.snapshot(post.id)
        hidden = snapshot.results_for(other_student.id)
        shown = snapshot.results_for(student.id)

        assert hidden["options"] == OPTIONS
        assert hidden["totalVotes"] is None
        assert hidden["showResults"] is False
        assert shown["totalVotes"] == 1
        assert shown["options"][0]["votes"] == 1

    def test_voter_sees_results(self, db_session, make_post, student):
        post = make_post()
        service = PollService(db_session)
        service.vote(post.id, student.id, "1")

        view = service.view(post.id, student.id)

        assert view["showResults"] is True
        assert view["userVotes"] == ["1"]
        assert view["totalVotes"] == 1
        assert view["pollOptions"][0] == {"id": "1", "text": "Yes", "votes": 1, "percentage": 100}

    def test_admin_sees_results_without_voting(self, db_session, make_post, student, admin):
        post = make_post()
        service = PollService(db_session)
        service.vote(post.id, student.id, "2")

        view = service.view(post.id, admin.id, is_admin=True)

        assert view["showResults"] is True
        assert view["userVotes"] == []

    def test_vote_status(self, db_session, make_post, student, other_student):
        post = make_post()
        service = PollService(db_session)
        service.vote(post.id, student.id, "2")

        assert service.vote_status(post.id, student.id) == (True, "2")
        assert service.vote_status(post.id, other_student.id) == (False, None)

    def test_results_to_dict(self, db_session, make_post, student):
        post = make_post()
        service = PollService(db_session)
        service.vote(post.id, student.id, "1")

        data = service.results(post.id).to_dict()

        assert data["question"] == "Apply early?"
        assert data["totalVotes"] == 1
        assert data["endsAt"] is None
