"""
Forum Router.

Posts, comments, likes, reports and polls. Every mutation commits through a
domain service first; the WebSocket broadcast is scheduled as a background
task and runs after the response has been sent.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context as current_user
from shared.utils.schemas import (
    CommentOutput,
    CreateCommentRequest,
    CreatePostRequest,
    LikeToggleOutput,
    PollResultsOutput,
    PollViewOutput,
    PostOutput,
    ReportOutput,
    ReportPostRequest,
    ReportResultOutput,
    UpdatePostRequest,
    VoteRequest,
    VoteStatusOutput,
)
from rest_api.routers._common import (
    Pagination,
    get_event_handlers,
    get_pagination,
    get_user_id,
    get_viewer,
)
from rest_api.services.domain import ForumModerationService, ForumService, PollService
from ws_gateway.components.events.handlers import WebSocketEventHandlers


router = APIRouter(prefix="/api/forum", tags=["forum"])


# =============================================================================
# Posts
# =============================================================================


@router.get("/posts", response_model=list[PostOutput])
def list_posts(
    category: str | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    viewer: tuple[str, bool] = Depends(get_viewer),
) -> list[PostOutput]:
    """
    List posts, newest first.

    Hidden and moderated posts are only listed for admins.
    """
    user_id, admin = viewer
    return ForumService(db).list_posts(
        user_id,
        is_admin=admin,
        category=category,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("/posts", response_model=PostOutput, status_code=status.HTTP_201_CREATED)
def create_post(
    body: CreatePostRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> PostOutput:
    """Create a post, optionally with a poll, and broadcast it to every client."""
    service = ForumService(db)
    post = service.create_post(
        get_user_id(user),
        content=body.content,
        category=body.category,
        title=body.title,
        tags=body.tags,
        images=body.images,
        poll_question=body.poll_question,
        poll_options=body.poll_options,
        poll_ends_at=body.poll_ends_at,
    )
    output = ForumService.present(post, viewer_id=None)
    background_tasks.add_task(handlers.forum.broadcast_post_created, output.to_wire())
    return output


@router.get("/posts/{post_id}", response_model=PostOutput)
def get_post(
    post_id: str,
    db: Session = Depends(get_db),
    viewer: tuple[str, bool] = Depends(get_viewer),
) -> PostOutput:
    """Get a post and count the view. Hidden or moderated posts are 404 for non-admins."""
    user_id, admin = viewer
    return ForumService(db).get_post(post_id, user_id, is_admin=admin)


@router.patch("/posts/{post_id}", response_model=PostOutput)
def update_post(
    post_id: str,
    body: UpdatePostRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> PostOutput:
    """Edit a post. Only the author may edit."""
    user_id = get_user_id(user)
    post = ForumService(db).update_post(
        post_id,
        user_id,
        content=body.content,
        title=body.title,
        tags=body.tags,
    )
    background_tasks.add_task(handlers.forum.broadcast_post_updated, post.id)
    return ForumService.present(post, viewer_id=user_id)


# =============================================================================
# Comments
# =============================================================================


@router.get("/posts/{post_id}/comments", response_model=list[CommentOutput])
def list_comments(
    post_id: str,
    db: Session = Depends(get_db),
    viewer: tuple[str, bool] = Depends(get_viewer),
) -> list[CommentOutput]:
    _, admin = viewer
    return ForumService(db).list_comments(post_id, is_admin=admin)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentOutput,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: str,
    body: CreateCommentRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> CommentOutput:
    comment = ForumService(db).create_comment(
        post_id,
        get_user_id(user),
        body.content,
        parent_id=body.parent_id,
    )
    output = CommentOutput.model_validate(comment)
    background_tasks.add_task(handlers.forum.broadcast_comment_created, post_id, output.to_wire())
    return output


# =============================================================================
# Likes
# =============================================================================


@router.post("/posts/{post_id}/like", response_model=LikeToggleOutput)
def toggle_like(
    post_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> LikeToggleOutput:
    """Like the post, or remove the caller's like if present."""
    liked, likes_count, liked_by = ForumService(db).toggle_like(post_id, get_user_id(user))
    background_tasks.add_task(
        handlers.forum.broadcast_post_like_update,
        post_id,
        likes_count,
        liked_by,
    )
    return LikeToggleOutput(post_id=post_id, liked=liked, likes_count=likes_count)


# =============================================================================
# Reports
# =============================================================================


@router.post(
    "/posts/{post_id}/report",
    response_model=ReportResultOutput,
    status_code=status.HTTP_201_CREATED,
)
def report_post(
    post_id: str,
    body: ReportPostRequest,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> ReportResultOutput:
    """
    Report a post. A user can report a post once; the post is hidden once
    it collects enough reports.

    Returns 409 if the caller already reported this post.
    """
    outcome = ForumModerationService(db).report_post(
        post_id,
        get_user_id(user),
        body.reason,
        body.details,
    )
    return ReportResultOutput(
        report=ReportOutput.model_validate(outcome.report),
        current_report_count=outcome.current_report_count,
        was_auto_hidden=outcome.was_auto_hidden,
    )


# =============================================================================
# Polls
# =============================================================================


@router.post("/posts/{post_id}/vote", response_model=PollViewOutput)
def vote(
    post_id: str,
    body: VoteRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> PollViewOutput:
    """
    Vote on a poll, replacing any earlier vote by the caller.

    Every authenticated client then receives the poll as its own user may
    see it.
    """
    user_id = get_user_id(user)
    outcome = PollService(db).vote(post_id, user_id, body.option_id)
    background_tasks.add_task(
        handlers.forum.broadcast_poll_update_with_privacy,
        post_id,
        user_id,
        outcome.snapshot,
    )
    return PollViewOutput.model_validate(outcome.snapshot.view_for(user_id))


@router.get("/posts/{post_id}/poll", response_model=PollViewOutput)
def get_poll(
    post_id: str,
    db: Session = Depends(get_db),
    viewer: tuple[str, bool] = Depends(get_viewer),
) -> PollViewOutput:
    """Poll as the caller may see it."""
    user_id, admin = viewer
    return PollViewOutput.model_validate(PollService(db).view(post_id, user_id, is_admin=admin))


@router.get("/posts/{post_id}/poll/results", response_model=PollResultsOutput)
def get_poll_results(
    post_id: str,
    db: Session = Depends(get_db),
    viewer: tuple[str, bool] = Depends(get_viewer),
) -> PollResultsOutput:
    """
    Poll results with counts and percentages.

    Voters and admins get the full results. Everyone else gets the options
    without counts and showResults false.
    """
    user_id, admin = viewer
    snapshot = PollService(db).snapshot(post_id, is_admin=admin)
    return PollResultsOutput.model_validate(snapshot.results_for(user_id, is_admin=admin))


@router.get("/posts/{post_id}/vote-status", response_model=VoteStatusOutput)
def get_vote_status(
    post_id: str,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> VoteStatusOutput:
    has_voted, option_id = PollService(db).vote_status(post_id, get_user_id(user))
    return VoteStatusOutput(has_voted=has_voted, option_id=option_id)
