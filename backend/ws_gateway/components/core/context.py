"""
WebSocket Context for audit logging.

Encapsulates connection metadata so audit calls do not repeat the same
argument list at every step of a connection's life.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from shared.config.logging import audit_ws_connection

if TYPE_CHECKING:
    from fastapi import WebSocket


# Control characters and Unicode direction overrides
_CONTROL_CHAR_PATTERN = re.compile(
    r'[\x00-\x1f\x7f-\x9f'  # ASCII control characters
    r'\u200b-\u200f'  # Zero-width and direction marks
    r'\u202a-\u202e'  # Bidirectional text formatting
    r'\u2066-\u2069'  # Isolate formatting characters
    r'\ufeff]'  # BOM
)


def sanitize_log_data(data: str, max_length: int = 100) -> str:
    """
    Sanitize user-provided data before logging.

    Truncates first so escape sequences are never cut in half, then strips
    control characters and escapes JSON-dangerous characters.

    Args:
        data: Raw user data.
        max_length: Maximum length to include in logs.

    Returns:
        Sanitized, truncated string safe for structured logging.
    """
    truncated = data[:max_length] if len(data) > max_length else data
    was_truncated = len(data) > max_length

    sanitized = _CONTROL_CHAR_PATTERN.sub('', truncated)

    # Backslashes first to avoid double-escaping
    sanitized = sanitized.replace('\\', '\\\\')
    sanitized = sanitized.replace('"', '\\"')

    if was_truncated:
        return sanitized + "..."
    return sanitized


@dataclass
class WebSocketContext:
    """
    Metadata of one gateway connection.

    Usage:
        ctx = WebSocketContext.from_websocket(websocket, connection_id)
        ctx.audit("CONNECT")
        ctx.user_id = "..."
        ctx.audit("DISCONNECT", reason="client_disconnect")
    """

    connection_id: str
    origin: str | None = None
    user_id: str | None = None

    @classmethod
    def from_websocket(cls, websocket: "WebSocket", connection_id: str) -> "WebSocketContext":
        origin = websocket.headers.get("origin") if websocket.headers else None
        return cls(
            connection_id=connection_id,
            origin=sanitize_log_data(origin) if origin else None,
        )

    def audit(self, event_type: str, reason: str | None = None, **extra: Any) -> None:
        """Write a security audit entry for this connection."""
        audit_ws_connection(
            event_type,
            self.connection_id,
            user_id=self.user_id,
            origin=self.origin,
            reason=reason,
            **extra,
        )
