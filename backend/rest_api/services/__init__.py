"""
Services module for business logic.

- domain/: Application services (business logic), one per area:
  forum posts, forum moderation, polls, chat, notifications, applications

Usage:
    from rest_api.services.domain import ForumModerationService
    service = ForumModerationService(db)
    outcome = service.report_post(post_id, user_id, "spam")
"""

from .domain import (
    ForumService,
    ForumModerationService,
    PollService,
    ChatService,
    NotificationService,
    ApplicationService,
)

__all__ = [
    "ForumService",
    "ForumModerationService",
    "PollService",
    "ChatService",
    "NotificationService",
    "ApplicationService",
]
