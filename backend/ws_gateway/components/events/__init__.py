"""Inbound frame parsing and outbound domain event handlers."""

from ws_gateway.components.events.types import (
    AuthenticateFrame,
    InboundFrame,
    InvalidFrameError,
    PingFrame,
    SubscribeFrame,
    UnknownFrame,
    event_envelope,
    parse_inbound,
    utc_timestamp,
)
from ws_gateway.components.events.handlers import (
    ApplicationStatusHandler,
    ChatMessageHandler,
    ForumHandler,
    NotificationHandler,
    WebSocketEventHandlers,
)

__all__ = [
    "AuthenticateFrame",
    "InboundFrame",
    "InvalidFrameError",
    "PingFrame",
    "SubscribeFrame",
    "UnknownFrame",
    "event_envelope",
    "parse_inbound",
    "utc_timestamp",
    "ApplicationStatusHandler",
    "ChatMessageHandler",
    "ForumHandler",
    "NotificationHandler",
    "WebSocketEventHandlers",
]
