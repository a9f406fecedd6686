"""
Poll Domain Service.

Tallies forum poll votes and decides what each viewer may see:
- voters (and admins reading over HTTP) get counts and percentages
- everyone else gets the bare option list, so results cannot sway a vote
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.infrastructure.db import transaction
from shared.utils.exceptions import PostNotFoundError, ValidationError
from rest_api.models import ForumPost, as_utc, utc_now
from rest_api.repositories import ForumPollRepository, ForumPostRepository

logger = get_logger(__name__)


def percentage(votes: int, total: int) -> int:
    """
    Share of the vote as a whole percent, rounded half up (12.5 -> 13).
    Integer arithmetic avoids float drift at exact halves.
    """
    if total <= 0:
        return 0
    return (votes * 200 + total) // (total * 2)


# =============================================================================
# Value objects
# =============================================================================


@dataclass(frozen=True, slots=True)
class PollResults:
    """
    Full results of a poll.

    Percentages are rounded per option and are not normalised, so they need
    not sum to 100 (three equal options give 33/33/33).
    """

    question: str | None
    options: tuple[dict[str, Any], ...]
    total_votes: int
    ends_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "options": [dict(option) for option in self.options],
            "totalVotes": self.total_votes,
            "endsAt": self.ends_at.isoformat() if self.ends_at else None,
        }


def build_results(
    question: str | None,
    options: list[dict[str, Any]],
    votes_by_user: Mapping[str, str],
    ends_at: datetime | None = None,
) -> PollResults:
    """Aggregate votes into per-option counts. Votes for unknown options are ignored."""
    counts = {str(option["id"]): 0 for option in options}
    for option_id in votes_by_user.values():
        if option_id in counts:
            counts[option_id] += 1

    total = sum(counts.values())
    rows = tuple(
        {
            "id": str(option["id"]),
            "text": option["text"],
            "votes": counts[str(option["id"])],
            "percentage": percentage(counts[str(option["id"])], total),
        }
        for option in options
    )
    return PollResults(question=question, options=rows, total_votes=total, ends_at=ends_at)


@dataclass(frozen=True, slots=True)
class PollSnapshot:
    """
    Everything needed to render a poll for any viewer, built from one tally.

    view_for() applies the privacy rule without touching the database, which
    keeps a fan-out to N connections at one query per vote.
    """

    post_id: str
    options: tuple[dict[str, Any], ...]
    results: PollResults
    votes_by_user: Mapping[str, str] = field(default_factory=dict)

    def user_votes(self, user_id: str | None) -> list[str]:
        if user_id is None or user_id not in self.votes_by_user:
            return []
        return [self.votes_by_user[user_id]]

    def has_voted(self, user_id: str | None) -> bool:
        return user_id is not None and user_id in self.votes_by_user

    def view_for(self, user_id: str | None, is_admin: bool = False) -> dict[str, Any]:
        """
        Poll payload for one viewer.

        Returns camelCase keys: pollOptions, userVotes, showResults and
        totalVotes (None unless results are shown).
        """
        show_results = self.has_voted(user_id) or is_admin
        if show_results:
            poll_options = [dict(option) for option in self.results.options]
        else:
            poll_options = [{"id": str(o["id"]), "text": o["text"]} for o in self.options]

        return {
            "postId": self.post_id,
            "pollOptions": poll_options,
            "userVotes": self.user_votes(user_id),
            "showResults": show_results,
            "totalVotes": self.results.total_votes if show_results else None,
        }

    def results_for(self, user_id: str | None, is_admin: bool = False) -> dict[str, Any]:
        """Results payload for one viewer. Non-voters get {id, text} options and a null total."""
        payload = self.results.to_dict()
        show_results = self.has_voted(user_id) or is_admin
        if not show_results:
            payload["options"] = [{"id": o["id"], "text": o["text"]} for o in payload["options"]]
            payload["totalVotes"] = None
        payload["showResults"] = show_results
        return payload


@dataclass(frozen=True, slots=True)
class VoteOutcome:
    """Result of a vote: the fresh snapshot plus the voter's own votes."""

    snapshot: PollSnapshot
    user_votes: list[str]

    @property
    def results(self) -> PollResults:
        return self.snapshot.results


# =============================================================================
# Service
# =============================================================================


class PollService:
    """
    Domain service for forum poll operations.

    Usage:
        service = PollService(db)
        outcome = service.vote(post_id, user_id, option_id)
        background_tasks.add_task(forum_handler.broadcast_poll_update_with_privacy,
                                  post_id, user_id, outcome.snapshot)
    """

    def __init__(self, db: Session):
        self._db = db
        self._posts = ForumPostRepository(db)
        self._votes = ForumPollRepository(db)

    def _get_poll_post(self, post_id: str, is_admin: bool = False) -> ForumPost:
        post = self._posts.find_by_id(post_id)
        if post is None or (not is_admin and not post.is_publicly_visible):
            raise PostNotFoundError(post_id)
        if not post.has_poll:
            raise ValidationError("This post does not have a poll", post_id=post_id)
        return post

    def _snapshot(self, post: ForumPost) -> PollSnapshot:
        votes_by_user = self._votes.votes_by_user(post.id)
        options = tuple(dict(option) for option in post.poll_options or [])
        results = build_results(
            post.poll_question,
            list(options),
            votes_by_user,
            as_utc(post.poll_ends_at),
        )
        return PollSnapshot(
            post_id=post.id,
            options=options,
            results=results,
            votes_by_user=MappingProxyType(dict(votes_by_user)),
        )

    def vote(self, post_id: str, user_id: str, option_id: str) -> VoteOutcome:
        """
        Record the user's vote (insert or overwrite) and recompute results.

        Raises:
            PostNotFoundError: Post missing or not visible.
            ValidationError: No poll, unknown option, or poll closed.
        """
        with transaction(self._db):
            post = self._get_poll_post(post_id)

            option_ids = {str(option["id"]) for option in post.poll_options or []}
            if option_id not in option_ids:
                raise ValidationError("Invalid poll option", post_id=post_id, option_id=option_id)

            ends_at = as_utc(post.poll_ends_at)
            if ends_at is not None and ends_at <= utc_now():
                raise ValidationError("This poll has ended", post_id=post_id)

            self._votes.upsert_vote(post_id, user_id, option_id)
            snapshot = self._snapshot(post)

        logger.info(
            "Poll vote recorded",
            post_id=post_id,
            user_id=user_id,
            option_id=option_id,
            total_votes=snapshot.results.total_votes,
        )
        return VoteOutcome(snapshot=snapshot, user_votes=snapshot.user_votes(user_id))

    def snapshot(self, post_id: str, is_admin: bool = False) -> PollSnapshot:
        """Current tally of a poll, one query for the votes."""
        return self._snapshot(self._get_poll_post(post_id, is_admin=is_admin))

    def results(self, post_id: str, is_admin: bool = False) -> PollResults:
        return self.snapshot(post_id, is_admin=is_admin).results

    def view(self, post_id: str, viewer_id: str | None, is_admin: bool = False) -> dict[str, Any]:
        """Poll as the viewer may see it (admins always see results)."""
        return self.snapshot(post_id, is_admin=is_admin).view_for(viewer_id, is_admin=is_admin)

    def vote_status(self, post_id: str, user_id: str) -> tuple[bool, str | None]:
        """(has_voted, option_id) for the user on this poll."""
        self._get_poll_post(post_id)
        vote = self._votes.find_vote(post_id, user_id)
        if vote is None:
            return False, None
        return True, vote.option_id

    def snapshots_for(self, posts: list[ForumPost]) -> dict[str, PollSnapshot]:
        """Snapshots for the poll posts in a listing, keyed by post ID."""
        return {post.id: self._snapshot(post) for post in posts if post.has_poll}
