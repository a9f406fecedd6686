"""
Application Domain Service.

Status changes on a student's university applications. Each change creates
an application_update notification for the student.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import ApplicationStatus, NotificationType, Roles
from shared.config.logging import get_logger
from shared.infrastructure.db import transaction
from shared.utils.exceptions import ForbiddenError, NotFoundError, ValidationError
from rest_api.models import Application, Notification, User
from rest_api.services.domain.notification_service import NotificationService

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StatusChange:
    application: Application
    previous_status: str
    notification: Notification


class ApplicationService:
    """Domain service for Application operations."""

    def __init__(self, db: Session):
        self._db = db
        self._notifications = NotificationService(db)

    def list_for_user(self, ctx: dict[str, Any]) -> Sequence[Application]:
        """Students see their own applications; counselors those of their students; admins all."""
        query = select(Application).order_by(Application.created_at.desc())
        role = ctx.get("role")
        if role == Roles.STUDENT:
            query = query.where(Application.student_id == ctx["sub"])
        elif role == Roles.COUNSELOR:
            assigned = select(User.id).where(User.assigned_counselor_id == ctx["sub"])
            query = query.where(Application.student_id.in_(assigned))
        return self._db.execute(query).scalars().all()

    def update_status(
        self,
        application_id: str,
        new_status: str,
        ctx: dict[str, Any],
        notes: str | None = None,
    ) -> StatusChange:
        """
        Change an application's status (counselor of the student, or admin).

        Raises:
            ValidationError: Unknown status.
            NotFoundError: No such application.
            ForbiddenError: Caller is not the student's counselor or an admin.
        """
        if new_status not in ApplicationStatus.ALL:
            raise ValidationError(f"Invalid application status '{new_status}'", status=new_status)

        application = self._db.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)

        role = ctx.get("role")
        if role == Roles.COUNSELOR:
            student = self._db.get(User, application.student_id)
            if student is None or student.assigned_counselor_id != ctx["sub"]:
                raise ForbiddenError("update this application", application_id=application_id)
        elif role != Roles.ADMIN:
            raise ForbiddenError("update application status", application_id=application_id)

        previous_status = application.status
        readable = new_status.replace("_", " ")
        with transaction(self._db):
            application.status = new_status
            if notes is not None:
                application.notes = notes
            notification = self._notifications.add_notification(
                application.student_id,
                NotificationType.APPLICATION_UPDATE,
                "Application status updated",
                f"Your application to {application.university_name} is now {readable}.",
                {"applicationId": application.id, "status": new_status},
            )

        self._db.refresh(application)
        self._db.refresh(notification)
        logger.info(
            "Application status changed",
            application_id=application_id,
            from_status=previous_status,
            to_status=new_status,
            actor_id=ctx["sub"],
        )
        return StatusChange(
            application=application,
            previous_status=previous_status,
            notification=notification,
        )
