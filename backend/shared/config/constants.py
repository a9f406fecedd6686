"""
Centralized constants for the backend application.
Avoids magic strings and repeated enum values across models, services and routers.

Usage:
    from shared.config.constants import Roles, ForumCategory, Limits

    if user.role == Roles.ADMIN:
        ...

    if category not in ForumCategory.ALL:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    STUDENT: Final[str] = "student"
    COUNSELOR: Final[str] = "counselor"
    ADMIN: Final[str] = "admin"

    ALL: Final[list[str]] = [STUDENT, COUNSELOR, ADMIN]


# =============================================================================
# Forum
# =============================================================================


class ForumCategory:
    """Forum post categories."""

    GENERAL: Final[str] = "general"
    USA_STUDY: Final[str] = "usa_study"
    UK_STUDY: Final[str] = "uk_study"
    CANADA_STUDY: Final[str] = "canada_study"
    AUSTRALIA_STUDY: Final[str] = "australia_study"
    IELTS_PREP: Final[str] = "ielts_prep"
    VISA_TIPS: Final[str] = "visa_tips"
    SCHOLARSHIPS: Final[str] = "scholarships"
    EUROPE_STUDY: Final[str] = "europe_study"

    ALL: Final[frozenset[str]] = frozenset({
        GENERAL, USA_STUDY, UK_STUDY, CANADA_STUDY, AUSTRALIA_STUDY,
        IELTS_PREP, VISA_TIPS, SCHOLARSHIPS, EUROPE_STUDY,
    })


class ReportReason:
    """Reasons a user may give when reporting a forum post."""

    SPAM: Final[str] = "spam"
    INAPPROPRIATE: Final[str] = "inappropriate"
    HARASSMENT: Final[str] = "harassment"
    MISINFORMATION: Final[str] = "misinformation"
    OFF_TOPIC: Final[str] = "off_topic"
    OTHER: Final[str] = "other"

    ALL: Final[frozenset[str]] = frozenset({
        SPAM, INAPPROPRIATE, HARASSMENT, MISINFORMATION, OFF_TOPIC, OTHER,
    })


class ModerationState:
    """Derived moderation state of a forum post."""

    VISIBLE: Final[str] = "visible"
    HIDDEN_BY_REPORTS: Final[str] = "hidden_by_reports"
    PERMANENTLY_MODERATED: Final[str] = "permanently_moderated"


# =============================================================================
# Notifications and applications
# =============================================================================


class NotificationType:
    """Notification kinds shown in the notification centre."""

    APPLICATION_UPDATE: Final[str] = "application_update"
    DOCUMENT_REMINDER: Final[str] = "document_reminder"
    MESSAGE: Final[str] = "message"
    SYSTEM: Final[str] = "system"
    DEADLINE: Final[str] = "deadline"

    ALL: Final[frozenset[str]] = frozenset({
        APPLICATION_UPDATE, DOCUMENT_REMINDER, MESSAGE, SYSTEM, DEADLINE,
    })


class ApplicationStatus:
    """University application status constants."""

    DRAFT: Final[str] = "draft"
    SUBMITTED: Final[str] = "submitted"
    UNDER_REVIEW: Final[str] = "under_review"
    ACCEPTED: Final[str] = "accepted"
    REJECTED: Final[str] = "rejected"
    WAITLISTED: Final[str] = "waitlisted"

    ALL: Final[frozenset[str]] = frozenset({
        DRAFT, SUBMITTED, UNDER_REVIEW, ACCEPTED, REJECTED, WAITLISTED,
    })


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits for user input."""

    # Forum posts
    MAX_POST_CONTENT_LENGTH: Final[int] = 10_000
    MAX_POST_TITLE_LENGTH: Final[int] = 500
    MAX_COMMENT_LENGTH: Final[int] = 2_000
    MAX_REPORT_DETAILS_LENGTH: Final[int] = 1_000
    MIN_POLL_OPTIONS: Final[int] = 2
    MAX_POLL_OPTIONS: Final[int] = 10

    # Chat
    MAX_CHAT_MESSAGE_LENGTH: Final[int] = 5_000

    # Notifications
    MAX_NOTIFICATION_TITLE_LENGTH: Final[int] = 255
    MAX_NOTIFICATION_MESSAGE_LENGTH: Final[int] = 1_000

    # Pagination
    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 100
