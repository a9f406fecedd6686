"""
Forum Poll Repository - Data access for poll votes.
"""

from sqlalchemy import select

from rest_api.models import ForumPollVote
from .base import BaseRepository


class ForumPollRepository(BaseRepository[ForumPollVote]):
    """Repository for ForumPollVote entities. One row per (post, user)."""

    @property
    def model(self) -> type[ForumPollVote]:
        return ForumPollVote

    def find_vote(self, post_id: str, user_id: str) -> ForumPollVote | None:
        return self._db.scalar(
            select(ForumPollVote).where(
                ForumPollVote.post_id == post_id,
                ForumPollVote.user_id == user_id,
            )
        )

    def upsert_vote(self, post_id: str, user_id: str, option_id: str) -> ForumPollVote:
        """Insert the user's vote or overwrite the option of the existing one."""
        vote = self.find_vote(post_id, user_id)
        if vote is None:
            return self.create(post_id=post_id, user_id=user_id, option_id=option_id)
        return self.update(vote, option_id=option_id)

    def votes_by_user(self, post_id: str) -> dict[str, str]:
        """
        The full tally for a post in one query: user_id -> option_id.
        Per-option counts and each viewer's own vote both derive from it.
        """
        rows = self._db.execute(
            select(ForumPollVote.user_id, ForumPollVote.option_id)
            .where(ForumPollVote.post_id == post_id)
        ).all()
        return {user_id: option_id for user_id, option_id in rows}
