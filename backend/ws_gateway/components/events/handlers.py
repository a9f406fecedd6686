"""
Domain event handlers.

Thin adapters that turn committed domain changes into WebSocket events and
hand them to the gateway's delivery primitives. Routers schedule these as
background tasks after the HTTP response, so a handler never blocks or fails
a request. Delivery is best effort: a closed socket is skipped and a send
error on one connection does not stop the others.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from shared.config.logging import get_logger
from ws_gateway.components.connection.registry import ConnectionRegistry
from ws_gateway.components.core.constants import OutboundKind
from ws_gateway.components.events.types import event_envelope, utc_timestamp

logger = get_logger(__name__)


class MessageSender(Protocol):
    """Delivery primitives of RealtimeGateway, as seen by handlers."""

    @property
    def registry(self) -> ConnectionRegistry: ...

    async def send_to_connection(self, connection_id: str, payload: dict[str, Any]) -> bool: ...

    async def send_to_user(self, user_id: str, payload: dict[str, Any]) -> int: ...

    async def broadcast_to_all(self, payload: dict[str, Any]) -> int: ...


class PollView(Protocol):
    """A poll tally that can render itself for one viewer."""

    def view_for(self, user_id: str | None, is_admin: bool = False) -> dict[str, Any]: ...


class BaseEventHandler:
    name = "BaseEventHandler"

    def __init__(self, gateway: MessageSender):
        self._gateway = gateway


class ChatMessageHandler(BaseEventHandler):
    """Chat events go to both participants of the conversation."""

    name = "ChatMessageHandler"

    async def _send_to_participants(self, student_id: str, counselor_id: str, payload: dict[str, Any]) -> int:
        results = await asyncio.gather(
            self._gateway.send_to_user(student_id, payload),
            self._gateway.send_to_user(counselor_id, payload),
        )
        return sum(results)

    async def broadcast_chat_message(
        self,
        student_id: str,
        counselor_id: str,
        message_data: dict[str, Any],
    ) -> int:
        sent = await self._send_to_participants(
            student_id,
            counselor_id,
            event_envelope(OutboundKind.CHAT_MESSAGE, message_data),
        )
        logger.debug("Chat message broadcast", message_id=message_data.get("id"), sent=sent)
        return sent

    async def broadcast_message_read_status(
        self,
        student_id: str,
        counselor_id: str,
        message_id: str,
        read_data: dict[str, Any],
    ) -> int:
        data = {"messageId": message_id, **read_data}
        return await self._send_to_participants(
            student_id,
            counselor_id,
            event_envelope(OutboundKind.MESSAGE_READ, data),
        )


class NotificationHandler(BaseEventHandler):
    name = "NotificationHandler"

    async def send_notification(self, user_id: str, notification: dict[str, Any]) -> int:
        return await self._gateway.send_to_user(
            user_id,
            event_envelope(OutboundKind.NOTIFICATION, notification),
        )


class ApplicationStatusHandler(BaseEventHandler):
    name = "ApplicationStatusHandler"

    async def send_application_update(self, user_id: str, application_data: dict[str, Any]) -> int:
        return await self._gateway.send_to_user(
            user_id,
            event_envelope(OutboundKind.APPLICATION_UPDATE, application_data),
        )


class ForumHandler(BaseEventHandler):
    """
    Forum events are public: every open connection receives them, except
    poll updates, which are rendered per authenticated viewer.
    """

    name = "ForumHandler"

    async def broadcast_post_created(self, post_data: dict[str, Any]) -> int:
        return await self._gateway.broadcast_to_all(
            event_envelope(OutboundKind.FORUM_POST_CREATED, {"post": post_data}),
        )

    async def broadcast_post_updated(self, post_id: str) -> int:
        return await self._gateway.broadcast_to_all(
            event_envelope(OutboundKind.FORUM_POST_UPDATED, {"postId": post_id}),
        )

    async def broadcast_post_like_update(self, post_id: str, like_count: int, liked_by: list[str]) -> int:
        return await self._gateway.broadcast_to_all(
            event_envelope(
                OutboundKind.FORUM_POST_LIKE_UPDATE,
                {"postId": post_id, "likeCount": like_count, "likedBy": liked_by},
            ),
        )

    async def broadcast_comment_created(self, post_id: str, comment_data: dict[str, Any]) -> int:
        return await self._gateway.broadcast_to_all(
            event_envelope(
                OutboundKind.FORUM_COMMENT_CREATED,
                {"postId": post_id, "comment": comment_data},
            ),
        )

    async def broadcast_poll_update_with_privacy(
        self,
        post_id: str,
        voting_user_id: str,
        snapshot: PollView,
    ) -> int:
        """
        Send each authenticated connection the poll as its own user may see it.

        Voters get counts and percentages; users who have not voted get only
        option ids and texts. Unauthenticated connections get nothing.
        """
        timestamp = utc_timestamp()
        targets = self._gateway.registry.all_authenticated_connections()

        async def deliver(user_id: str, connection_id: str) -> bool:
            view = snapshot.view_for(user_id)
            data = {
                "postId": post_id,
                "pollOptions": view["pollOptions"],
                "userVotes": view["userVotes"],
                "showResults": view["showResults"],
                "votingUserId": voting_user_id,
                "timestamp": timestamp,
            }
            return await self._gateway.send_to_connection(
                connection_id,
                event_envelope(OutboundKind.POLL_VOTE_UPDATE, data),
            )

        results = await asyncio.gather(
            *(deliver(user_id, connection_id) for user_id, connection_id in targets),
            return_exceptions=True,
        )
        sent = sum(1 for r in results if r is True)
        for r in results:
            if isinstance(r, Exception):
                logger.warning("Poll update delivery failed", post_id=post_id, error=str(r))

        logger.info("Poll update broadcast", post_id=post_id, targets=len(targets), sent=sent)
        return sent


class WebSocketEventHandlers:
    """Bundle of every domain handler, built once per gateway."""

    def __init__(self, gateway: MessageSender):
        self.chat = ChatMessageHandler(gateway)
        self.notification = NotificationHandler(gateway)
        self.application_status = ApplicationStatusHandler(gateway)
        self.forum = ForumHandler(gateway)

    def get_all_handlers(self) -> dict[str, BaseEventHandler]:
        return {
            "chat": self.chat,
            "notification": self.notification,
            "applicationStatus": self.application_status,
            "forum": self.forum,
        }
