"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, id/timestamp mixins, UTC helpers
- user: User
- forum: ForumPost, ForumComment, ForumLike, ForumPostReport, ForumPollVote
- chat: ChatMessage
- notification: Notification
- application: Application
"""

# Base classes
from .base import Base, IdMixin, TimestampMixin, new_id, utc_now, as_utc

# Users
from .user import User

# Forum
from .forum import ForumPost, ForumComment, ForumLike, ForumPostReport, ForumPollVote

# Messaging
from .chat import ChatMessage
from .notification import Notification

# Applications
from .application import Application

__all__ = [
    # Base
    "Base",
    "IdMixin",
    "TimestampMixin",
    "new_id",
    "utc_now",
    "as_utc",
    # Users
    "User",
    # Forum
    "ForumPost",
    "ForumComment",
    "ForumLike",
    "ForumPostReport",
    "ForumPollVote",
    # Messaging
    "ChatMessage",
    "Notification",
    # Applications
    "Application",
]
