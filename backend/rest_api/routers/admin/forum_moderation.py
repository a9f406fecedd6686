"""
Admin forum moderation endpoints.

Review posts hidden by reports, then either restore them (reports cleared,
post visible again) or moderate them permanently.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import admin_user_context
from shared.utils.schemas import (
    ModerationActionOutput,
    PostOutput,
    ReportedPostOutput,
    ReportOutput,
    UserSummary,
)
from rest_api.routers._common import get_user_id
from rest_api.services.domain import ForumModerationService, ForumService
from rest_api.services.domain.forum_moderation_service import ReportedPost


router = APIRouter(prefix="/forum", tags=["admin-forum"])


def _to_output(reported: ReportedPost, admin_id: str) -> ReportedPostOutput:
    first = reported.first_reporter
    return ReportedPostOutput(
        post=ForumService.present(reported.post, viewer_id=admin_id, is_admin=True),
        reports=[ReportOutput.model_validate(r) for r in reported.reports],
        first_reporter=UserSummary.model_validate(first) if first is not None else None,
    )


@router.get("/reported", response_model=list[ReportedPostOutput])
def list_reported_posts(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(admin_user_context),
) -> list[ReportedPostOutput]:
    """Posts currently hidden by reports, most recently hidden first."""
    admin_id = get_user_id(user)
    return [_to_output(r, admin_id) for r in ForumModerationService(db).get_reported_posts()]


@router.get("/reported/{post_id}", response_model=ReportedPostOutput)
def get_report_details(
    post_id: str,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(admin_user_context),
) -> ReportedPostOutput:
    return _to_output(ForumModerationService(db).get_report_details(post_id), get_user_id(user))


@router.post("/posts/{post_id}/restore", response_model=ModerationActionOutput)
def restore_post(
    post_id: str,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(admin_user_context),
) -> ModerationActionOutput:
    """Clear every report on the post and make it visible again."""
    post = ForumModerationService(db).restore_post(post_id, get_user_id(user))
    return ModerationActionOutput(
        post_id=post.id,
        moderation_state=post.moderation_state,
        message="Post restored",
    )


@router.post("/posts/{post_id}/moderate", response_model=ModerationActionOutput)
def moderate_post(
    post_id: str,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(admin_user_context),
) -> ModerationActionOutput:
    """Permanently remove the post from public view. Content is kept for audit."""
    post = ForumModerationService(db).moderate_post(post_id, get_user_id(user))
    return ModerationActionOutput(
        post_id=post.id,
        moderation_state=post.moderation_state,
        message="Post permanently moderated",
    )
