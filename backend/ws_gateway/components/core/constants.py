"""
WebSocket Gateway Constants.

Close codes, frame kinds and operational defaults used by the gateway.
"""

from enum import IntEnum
from typing import Final, TYPE_CHECKING

from starlette.websockets import WebSocketState

if TYPE_CHECKING:
    from fastapi import WebSocket

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "InboundKind",
    "OutboundKind",
    "is_ws_connected",
]


class WSCloseCode(IntEnum):
    """WebSocket close codes used by the gateway (RFC 6455)."""

    NORMAL = 1000  # Normal closure
    GOING_AWAY = 1001  # Server shutting down or client navigating away
    POLICY_VIOLATION = 1008  # Authentication failed
    MESSAGE_TOO_BIG = 1009  # Frame exceeds ws_max_message_size
    SERVER_ERROR = 1011  # Unexpected server error


class WSConstants:
    """
    WebSocket Gateway operational constants.

    These are defaults used when settings are not available. At runtime the
    gateway reads ws_max_message_size and ws_monitor_interval from settings.
    """

    # Largest inbound text frame accepted (64 KB)
    MAX_MESSAGE_SIZE: Final[int] = 64 * 1024

    # Seconds between connection-count log lines
    MONITOR_INTERVAL: Final[int] = 30

    # Attempts at generating a connection id that is not already registered
    MAX_ID_ATTEMPTS: Final[int] = 5

    # Characters of user-provided data kept in logs
    LOG_TRUNCATE_LENGTH: Final[int] = 100


class InboundKind:
    """Frame types a client may send."""

    AUTHENTICATE: Final[str] = "authenticate"
    PING: Final[str] = "ping"
    SUBSCRIBE: Final[str] = "subscribe"


class OutboundKind:
    """Frame and event types the server sends."""

    # Control frames (flat objects)
    CONNECTED: Final[str] = "connected"
    AUTHENTICATED: Final[str] = "authenticated"
    AUTH_ERROR: Final[str] = "auth_error"
    PONG: Final[str] = "pong"
    SUBSCRIBED: Final[str] = "subscribed"
    ERROR: Final[str] = "error"

    # Domain events ({type, data, timestamp} envelopes)
    CHAT_MESSAGE: Final[str] = "chat_message"
    MESSAGE_READ: Final[str] = "message_read"
    NOTIFICATION: Final[str] = "notification"
    APPLICATION_UPDATE: Final[str] = "application_update"
    FORUM_POST_CREATED: Final[str] = "forum_post_created"
    FORUM_POST_UPDATED: Final[str] = "forum_post_updated"
    FORUM_POST_LIKE_UPDATE: Final[str] = "forum_post_like_update"
    FORUM_COMMENT_CREATED: Final[str] = "forum_comment_created"
    POLL_VOTE_UPDATE: Final[str] = "poll_vote_update"


def is_ws_connected(ws: "WebSocket") -> bool:
    """
    Check if WebSocket is in connected state before sending.

    Starlette exposes no transitional states, so a socket may still appear
    connected briefly after the peer started closing.
    """
    return (
        ws.client_state == WebSocketState.CONNECTED
        and ws.application_state == WebSocketState.CONNECTED
    )
