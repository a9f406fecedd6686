"""
Applications Router.

University applications. Students list their own; the assigned counselor or
an admin changes the status, which pushes application_update and a
notification to the student.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context as current_user
from shared.utils.schemas import (
    ApplicationOutput,
    NotificationOutput,
    UpdateApplicationStatusRequest,
)
from rest_api.routers._common import get_event_handlers
from rest_api.services.domain import ApplicationService
from ws_gateway.components.events.handlers import WebSocketEventHandlers


router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.get("", response_model=list[ApplicationOutput])
def list_applications(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> list[ApplicationOutput]:
    return [ApplicationOutput.model_validate(a) for a in ApplicationService(db).list_for_user(user)]


@router.patch("/{application_id}/status", response_model=ApplicationOutput)
def update_application_status(
    application_id: str,
    body: UpdateApplicationStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> ApplicationOutput:
    """Counselor of the student or admin only."""
    change = ApplicationService(db).update_status(application_id, body.status, user, body.notes)
    output = ApplicationOutput.model_validate(change.application)
    student_id = change.application.student_id

    background_tasks.add_task(
        handlers.application_status.send_application_update,
        student_id,
        {**output.to_wire(), "previousStatus": change.previous_status},
    )
    background_tasks.add_task(
        handlers.notification.send_notification,
        student_id,
        NotificationOutput.model_validate(change.notification).to_wire(),
    )
    return output
