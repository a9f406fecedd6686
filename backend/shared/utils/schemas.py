"""
Shared Pydantic schemas used across the application.

Field names are snake_case in Python and camelCase on the wire, both for
HTTP responses and for WebSocket event payloads, so the same DTO serves both.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every DTO: camelCase aliases, ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict with camelCase keys, as sent over the WebSocket."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Common
# =============================================================================


class UserSummary(CamelModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    role: str


# =============================================================================
# Forum
# =============================================================================


class PollOption(CamelModel):
    """Option as stored on the post and as shown to non-voters."""

    id: str
    text: str


class CreatePostRequest(CamelModel):
    """New forum post. Poll fields are all-or-nothing."""

    content: str
    title: str | None = None
    category: str
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    poll_question: str | None = None
    # {id, text} objects keep their ids; bare strings get option_<index>
    poll_options: list[PollOption | str] | None = None
    # ISO 8601; blank or unparseable values mean "no end date"
    poll_ends_at: str | None = None


class UpdatePostRequest(CamelModel):
    content: str | None = None
    title: str | None = None
    tags: list[str] | None = None


class PostOutput(CamelModel):
    id: str
    author_id: str
    author: UserSummary | None = None
    title: str | None = None
    content: str
    category: str
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    poll_question: str | None = None
    poll_options: list[dict[str, Any]] | None = None
    poll_ends_at: datetime | None = None
    likes_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    report_count: int = 0
    is_edited: bool = False
    edited_at: datetime | None = None
    is_hidden_by_reports: bool = False
    hidden_at: datetime | None = None
    is_moderated: bool = False
    moderated_at: datetime | None = None
    moderation_state: str
    created_at: datetime
    updated_at: datetime | None = None
    # Viewer-specific
    is_liked: bool = False
    user_votes: list[str] = Field(default_factory=list)
    show_results: bool = False


class CreateCommentRequest(CamelModel):
    content: str
    parent_id: str | None = None


class CommentOutput(CamelModel):
    id: str
    post_id: str
    user_id: str
    parent_id: str | None = None
    content: str
    author: UserSummary | None = None
    created_at: datetime


class LikeToggleOutput(CamelModel):
    post_id: str
    liked: bool
    likes_count: int


class ReportPostRequest(CamelModel):
    reason: str
    details: str | None = None


class ReportOutput(CamelModel):
    id: str
    post_id: str
    reporter_user_id: str
    report_reason: str
    report_details: str | None = None
    created_at: datetime


class ReportResultOutput(CamelModel):
    report: ReportOutput
    current_report_count: int
    was_auto_hidden: bool


class ReportedPostOutput(CamelModel):
    """Admin view of a hidden post with every report filed against it."""

    post: PostOutput
    reports: list[ReportOutput]
    first_reporter: UserSummary | None = None


class ModerationActionOutput(CamelModel):
    post_id: str
    moderation_state: str
    message: str


class VoteRequest(CamelModel):
    option_id: str


class PollResultsOutput(CamelModel):
    """Poll results. Non-voters get options without counts and a null total."""

    question: str | None = None
    options: list[dict[str, Any]]
    total_votes: int | None = None
    show_results: bool
    ends_at: datetime | None = None


class PollViewOutput(CamelModel):
    """Poll as a particular viewer is allowed to see it."""

    post_id: str
    poll_options: list[dict[str, Any]]
    user_votes: list[str]
    show_results: bool
    total_votes: int | None = None


class VoteStatusOutput(CamelModel):
    has_voted: bool
    option_id: str | None = None


# =============================================================================
# Chat
# =============================================================================


class SendMessageRequest(CamelModel):
    """
    A chat message. Students always write to their assigned counselor;
    counselors must name the student.
    """

    message: str
    student_id: str | None = None


class ChatMessageOutput(CamelModel):
    id: str
    student_id: str
    counselor_id: str
    sender_id: str
    message: str
    is_read: bool
    read_at: datetime | None = None
    is_edited: bool = False
    created_at: datetime


# =============================================================================
# Notifications
# =============================================================================


class NotificationOutput(CamelModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: dict[str, Any] | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class UnreadCountOutput(CamelModel):
    count: int


# =============================================================================
# Applications
# =============================================================================


class ApplicationOutput(CamelModel):
    id: str
    student_id: str
    university_name: str
    program: str | None = None
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class UpdateApplicationStatusRequest(CamelModel):
    status: str
    notes: str | None = None
