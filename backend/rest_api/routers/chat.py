"""
Counselor Chat Router.

Students talk to their assigned counselor; counselors talk to each of their
assigned students. New messages and read receipts are pushed to both
participants over the WebSocket after the response.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context as current_user
from shared.utils.schemas import (
    ChatMessageOutput,
    NotificationOutput,
    SendMessageRequest,
    UnreadCountOutput,
)
from rest_api.models import as_utc
from rest_api.routers._common import get_event_handlers, get_user_id
from rest_api.services.domain import ChatService
from ws_gateway.components.events.handlers import WebSocketEventHandlers


router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/messages", response_model=list[ChatMessageOutput])
def list_messages(
    student_id: str | None = Query(default=None, alias="studentId"),
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> list[ChatMessageOutput]:
    """
    Conversation of the caller, oldest first.

    Counselors pass ?studentId= to pick the conversation.
    """
    messages = ChatService(db).list_conversation(user, student_id)
    return [ChatMessageOutput.model_validate(m) for m in messages]


@router.post("/messages", response_model=ChatMessageOutput, status_code=status.HTTP_201_CREATED)
def send_message(
    body: SendMessageRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> ChatMessageOutput:
    """
    Send a message.

    Returns 429 with Retry-After when the caller sent a message too recently.
    """
    sent = ChatService(db).send_message(user, body.message, body.student_id)
    message = sent.message
    output = ChatMessageOutput.model_validate(message)

    background_tasks.add_task(
        handlers.chat.broadcast_chat_message,
        message.student_id,
        message.counselor_id,
        output.to_wire(),
    )
    background_tasks.add_task(
        handlers.notification.send_notification,
        sent.notification.user_id,
        NotificationOutput.model_validate(sent.notification).to_wire(),
    )
    return output


@router.post("/messages/{message_id}/read", response_model=ChatMessageOutput)
def mark_message_read(
    message_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
    handlers: WebSocketEventHandlers = Depends(get_event_handlers),
) -> ChatMessageOutput:
    """Mark a received message as read. Only the recipient may do this."""
    message = ChatService(db).mark_as_read(message_id, user)
    read_at = as_utc(message.read_at)
    background_tasks.add_task(
        handlers.chat.broadcast_message_read_status,
        message.student_id,
        message.counselor_id,
        message.id,
        {
            "userId": get_user_id(user),
            "read": True,
            "timestamp": read_at.isoformat() if read_at else None,
        },
    )
    return ChatMessageOutput.model_validate(message)


@router.get("/unread-count", response_model=UnreadCountOutput)
def unread_count(
    db: Session = Depends(get_db),
    user: dict[str, Any] = Depends(current_user),
) -> UnreadCountOutput:
    return UnreadCountOutput(count=ChatService(db).unread_count(get_user_id(user)))
