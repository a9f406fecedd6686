"""
Chat Domain Service.

Direct messages between a student and their assigned counselor. Each sent
message also creates a "message" notification for the recipient in the
same transaction.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from sqlalchemy.orm import Session

from shared.config.constants import Limits, NotificationType, Roles
from shared.config.logging import chat_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import transaction
from shared.utils.exceptions import (
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from rest_api.models import ChatMessage, Notification, User, utc_now
from rest_api.repositories import ChatMessageRepository
from rest_api.services.domain.notification_service import NotificationService


class ChatRateLimiter:
    """
    Minimum interval between messages per user, kept in process memory.

    Sync routes run in a threadpool, so the check and the stamp happen under
    one lock. Expired stamps are pruned at most once per interval.
    """

    def __init__(
        self,
        interval_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._interval = settings.chat_rate_limit_seconds if interval_seconds is None else interval_seconds
        self._clock = clock
        self._last_sent: dict[str, float] = {}
        self._last_prune = clock()
        self._lock = threading.Lock()

    def try_acquire(self, user_id: str) -> int:
        """
        Claim the user's next send slot.

        Returns 0 and stamps the user when allowed, otherwise the seconds
        left to wait (nothing is stamped).
        """
        with self._lock:
            now = self._clock()
            self._prune(now)
            last = self._last_sent.get(user_id)
            if last is not None:
                remaining = self._interval - (now - last)
                if remaining > 0:
                    return max(1, math.ceil(remaining))
            self._last_sent[user_id] = now
            return 0

    def release(self, user_id: str) -> None:
        """Give back a slot claimed by a send that then failed."""
        with self._lock:
            self._last_sent.pop(user_id, None)

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self._interval:
            return
        cutoff = now - self._interval
        self._last_sent = {uid: ts for uid, ts in self._last_sent.items() if ts > cutoff}
        self._last_prune = now

    def __len__(self) -> int:
        return len(self._last_sent)

    def reset(self) -> None:
        with self._lock:
            self._last_sent.clear()


# Process-wide limiter shared by every request
chat_rate_limiter = ChatRateLimiter()


@dataclass(frozen=True, slots=True)
class SentMessage:
    message: ChatMessage
    notification: Notification


class ChatService:
    """Domain service for ChatMessage operations."""

    def __init__(self, db: Session, rate_limiter: ChatRateLimiter | None = None):
        self._db = db
        self._repo = ChatMessageRepository(db)
        self._notifications = NotificationService(db)
        self._rate_limiter = rate_limiter or chat_rate_limiter

    def _get_user(self, user_id: str) -> User:
        user = self._db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def resolve_conversation(self, ctx: dict[str, Any], student_id: str | None) -> tuple[str, str]:
        """
        (student_id, counselor_id) of the conversation the caller may access.

        Students talk to their assigned counselor; counselors name one of
        their assigned students.
        """
        user_id = ctx["sub"]
        role = ctx.get("role")

        if role == Roles.STUDENT:
            student = self._get_user(user_id)
            if not student.assigned_counselor_id:
                raise ValidationError("No counselor is assigned to you yet", user_id=user_id)
            return student.id, student.assigned_counselor_id

        if role == Roles.COUNSELOR:
            if not student_id:
                raise ValidationError("studentId is required")
            student = self._get_user(student_id)
            if student.assigned_counselor_id != user_id:
                raise ForbiddenError("message this student", counselor_id=user_id, student_id=student_id)
            return student.id, user_id

        raise ForbiddenError("use counselor chat", user_id=user_id, role=role)

    def send_message(self, ctx: dict[str, Any], text: str, student_id: str | None = None) -> SentMessage:
        """
        Send a message in the caller's conversation.

        Raises:
            ValidationError: Empty or oversized text, no assigned counselor.
            ForbiddenError: Not a participant of the conversation.
            RateLimitedError: Sender is within the per-user interval.
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message cannot be empty")
        if len(text) > Limits.MAX_CHAT_MESSAGE_LENGTH:
            raise ValidationError(f"Message must be at most {Limits.MAX_CHAT_MESSAGE_LENGTH} characters")

        sender_id = ctx["sub"]
        conv_student_id, counselor_id = self.resolve_conversation(ctx, student_id)
        sender = self._get_user(sender_id)

        retry_after = self._rate_limiter.try_acquire(sender_id)
        if retry_after:
            raise RateLimitedError(retry_after, context="Chat", user_id=sender_id)

        try:
            with transaction(self._db):
                message = self._repo.create(
                    student_id=conv_student_id,
                    counselor_id=counselor_id,
                    sender_id=sender_id,
                    message=text,
                )
                notification = self._notifications.add_notification(
                    message.recipient_id,
                    NotificationType.MESSAGE,
                    "New message",
                    f"You have a new message from {sender.display_name}.",
                    {"messageId": message.id, "senderId": sender_id},
                )
        except Exception:
            self._rate_limiter.release(sender_id)
            raise

        self._db.refresh(message)
        self._db.refresh(notification)

        logger.info(
            "Chat message sent",
            message_id=message.id,
            sender_id=sender_id,
            recipient_id=message.recipient_id,
        )
        return SentMessage(message=message, notification=notification)

    def list_conversation(self, ctx: dict[str, Any], student_id: str | None = None) -> Sequence[ChatMessage]:
        conv_student_id, counselor_id = self.resolve_conversation(ctx, student_id)
        return self._repo.find_conversation(conv_student_id, counselor_id)

    def mark_as_read(self, message_id: str, ctx: dict[str, Any]) -> ChatMessage:
        """Only the recipient can mark a message read. Idempotent."""
        message = self._repo.find_by_id(message_id)
        if message is None or message.is_deleted:
            raise NotFoundError("Chat message", message_id)

        user_id = ctx["sub"]
        if message.recipient_id != user_id:
            raise ForbiddenError("mark this message as read", message_id=message_id, user_id=user_id)

        if not message.is_read:
            with transaction(self._db):
                self._repo.update(message, is_read=True, read_at=utc_now())
            self._db.refresh(message)
            logger.debug("Chat message read", message_id=message_id, user_id=user_id)
        return message

    def unread_count(self, user_id: str) -> int:
        return self._repo.count_unread_for(user_id)
