"""Core WebSocket gateway constants and connection context."""

from ws_gateway.components.core.constants import (
    WSCloseCode,
    WSConstants,
    InboundKind,
    OutboundKind,
    is_ws_connected,
)
from ws_gateway.components.core.context import WebSocketContext, sanitize_log_data

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "InboundKind",
    "OutboundKind",
    "is_ws_connected",
    "WebSocketContext",
    "sanitize_log_data",
]
