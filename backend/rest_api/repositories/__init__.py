"""
Repository Pattern implementation.
Centralizes data access; repositories flush but never commit.

Usage:
    from rest_api.repositories import ForumPostRepository, PostFilters

    repo = ForumPostRepository(db)
    posts = repo.find_all(PostFilters(category="visa_tips"))
    post = repo.find_by_id(post_id)
"""

from .base import BaseRepository, RepositoryFilters
from .forum_post import ForumPostRepository, PostFilters
from .forum_report import ForumReportRepository
from .forum_poll import ForumPollRepository
from .forum_interaction import (
    ForumLikeRepository,
    ForumCommentRepository,
)
from .chat import ChatMessageRepository
from .notification import NotificationRepository

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryFilters",
    # Forum
    "ForumPostRepository",
    "PostFilters",
    "ForumReportRepository",
    "ForumPollRepository",
    "ForumLikeRepository",
    "ForumCommentRepository",
    # Messaging
    "ChatMessageRepository",
    "NotificationRepository",
]
