"""
Domain Services - Application Layer.

Services contain business logic and own the transaction boundary.
They use Repositories for data access; realtime fan-out is scheduled by the
routers after the service call returns.

Structure:
    Router (thin controller)  -> schedules WebSocket broadcast
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)
"""

from .notification_service import NotificationService
from .poll_service import PollService, PollSnapshot, PollResults, build_results, percentage
from .forum_moderation_service import ForumModerationService, ReportOutcome, ReportedPost
from .forum_service import ForumService
from .chat_service import ChatService, ChatRateLimiter, chat_rate_limiter
from .application_service import ApplicationService

__all__ = [
    "NotificationService",
    "PollService",
    "PollSnapshot",
    "PollResults",
    "build_results",
    "percentage",
    "ForumModerationService",
    "ReportOutcome",
    "ReportedPost",
    "ForumService",
    "ChatService",
    "ChatRateLimiter",
    "chat_rate_limiter",
    "ApplicationService",
]
