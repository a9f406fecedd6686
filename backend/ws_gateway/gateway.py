"""
Realtime Gateway.

Owns the lifecycle of every /ws connection and the three delivery
primitives the domain handlers use: send to one connection, send to every
connection of a user, broadcast to every open connection.

Connection lifecycle:
    accept -> register -> "connected" frame -> message loop -> unregister

Clients authenticate in-band with {"type": "authenticate", "token": ...}.
A missing token leaves the connection open; an invalid one closes it with
1008.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from shared.config.logging import ws_gateway_logger as logger
from shared.config.settings import settings
from ws_gateway.components.auth.strategies import TokenVerifier, authenticate_token
from ws_gateway.components.connection.registry import ConnectionRegistry
from ws_gateway.components.core.constants import WSCloseCode, WSConstants, is_ws_connected
from ws_gateway.components.core.context import WebSocketContext, sanitize_log_data
from ws_gateway.components.events.types import (
    AuthenticateFrame,
    InvalidFrameError,
    PingFrame,
    SubscribeFrame,
    UnknownFrame,
    auth_error_frame,
    authenticated_frame,
    connected_frame,
    error_frame,
    parse_inbound,
    pong_frame,
    subscribed_frame,
)


class RealtimeGateway:
    """
    WebSocket gateway bound to one ConnectionRegistry and one TokenVerifier.

    Usage:
        gateway = RealtimeGateway(ConnectionRegistry(), JWTTokenVerifier())

        @router.websocket("/ws")
        async def ws(websocket: WebSocket):
            await gateway.handle_connection(websocket)
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        verifier: TokenVerifier,
        max_message_size: int | None = None,
    ):
        self._registry = registry
        self._verifier = verifier
        self._max_message_size = max_message_size or settings.ws_max_message_size or WSConstants.MAX_MESSAGE_SIZE
        self._contexts: dict[str, WebSocketContext] = {}

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    def stats(self) -> dict[str, int]:
        return self._registry.stats()

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def handle_connection(self, websocket: WebSocket) -> None:
        """Serve one client until it disconnects or fails authentication."""
        await websocket.accept()
        connection_id = self._registry.register(websocket)
        context = WebSocketContext.from_websocket(websocket, connection_id)
        self._contexts[connection_id] = context
        context.audit("CONNECT")

        reason = "client_disconnect"
        try:
            await self.send_to_connection(connection_id, connected_frame(connection_id))
            while connection_id in self._registry:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                data = message.get("text")
                if data is None:
                    data = message.get("bytes") or b""
                if not await self.handle_frame(connection_id, data):
                    reason = "closed_by_server"
                    break
        except WebSocketDisconnect:
            pass
        except Exception as e:
            reason = "transport_error"
            logger.warning(
                "WebSocket connection error",
                connection_id=connection_id,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self._registry.unregister(connection_id)
            self._contexts.pop(connection_id, None)
            context.audit("DISCONNECT", reason=reason)

    async def handle_frame(self, connection_id: str, data: str | bytes) -> bool:
        """
        Process one inbound frame.

        Binary frames are decoded as UTF-8 and then handled like text.
        Returns False when the connection has been closed and the message
        loop must stop.
        """
        if len(data) > self._max_message_size:
            logger.warning(
                "Message too large",
                connection_id=connection_id,
                size=len(data),
                max_size=self._max_message_size,
            )
            await self._close(connection_id, WSCloseCode.MESSAGE_TOO_BIG, "Message too large")
            return False

        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            frame = parse_inbound(data)
        except (InvalidFrameError, UnicodeDecodeError):
            logger.debug("Invalid frame", connection_id=connection_id, data=sanitize_log_data(str(data)))
            await self.send_to_connection(connection_id, error_frame("Invalid message format"))
            return True

        if isinstance(frame, AuthenticateFrame):
            return await self._on_authenticate(connection_id, frame)
        if isinstance(frame, PingFrame):
            await self.send_to_connection(connection_id, pong_frame())
        elif isinstance(frame, SubscribeFrame):
            await self.send_to_connection(connection_id, subscribed_frame(frame.topic))
        elif isinstance(frame, UnknownFrame):
            logger.info(
                "Unknown message type",
                connection_id=connection_id,
                message_type=sanitize_log_data(str(frame.kind)),
            )
        return True

    async def _on_authenticate(self, connection_id: str, frame: AuthenticateFrame) -> bool:
        if frame.token is None:
            await self.send_to_connection(connection_id, auth_error_frame("Authentication token required"))
            return True

        result = authenticate_token(self._verifier, frame.token)
        context = self._contexts.get(connection_id)

        if not result.success:
            if context:
                context.audit("AUTH_FAILED", reason=result.audit_reason)
            await self.send_to_connection(connection_id, auth_error_frame(result.error_message))
            await self._close(connection_id, result.close_code, "Authentication failed")
            return False

        self._registry.authenticate(connection_id, result.user_id)
        if context:
            context.user_id = result.user_id
            context.audit("AUTHENTICATED")
        await self.send_to_connection(connection_id, authenticated_frame(result.user_id))
        return True

    async def _close(self, connection_id: str, code: int, reason: str) -> None:
        connection = self._registry.get(connection_id)
        if connection is not None and is_ws_connected(connection.socket):
            try:
                await connection.socket.close(code=code, reason=reason)
            except Exception as e:
                logger.debug("Close failed", connection_id=connection_id, error=str(e))
        self._registry.unregister(connection_id)

    # =========================================================================
    # Delivery
    # =========================================================================

    async def send_to_connection(self, connection_id: str, payload: dict[str, Any]) -> bool:
        """
        Send a JSON payload to one connection.

        Returns False when the connection is unknown, closed, or the send
        raised. Errors are logged, never propagated.
        """
        connection = self._registry.get(connection_id)
        if connection is None or not is_ws_connected(connection.socket):
            return False
        try:
            await connection.socket.send_json(payload)
            return True
        except Exception as e:
            logger.debug(
                "Send failed",
                connection_id=connection_id,
                event_type=payload.get("type"),
                error=str(e),
            )
            return False

    async def _send_many(self, connection_ids: list[str], payload: dict[str, Any]) -> int:
        if not connection_ids:
            return 0
        results = await asyncio.gather(
            *(self.send_to_connection(cid, payload) for cid in connection_ids),
            return_exceptions=True,
        )
        return sum(1 for r in results if r is True)

    async def send_to_user(self, user_id: str, payload: dict[str, Any]) -> int:
        """Send to every open connection authenticated as user_id. Returns the delivered count."""
        return await self._send_many(self._registry.connections_for_user(user_id), payload)

    async def broadcast_to_all(self, payload: dict[str, Any]) -> int:
        """Send to every open connection, authenticated or not."""
        sent = await self._send_many(self._registry.all_open_connections(), payload)
        logger.debug("Broadcast", event_type=payload.get("type"), sent=sent)
        return sent
