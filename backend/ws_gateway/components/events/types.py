"""
Frame and event types for the WebSocket gateway.

Inbound frames are parsed once into small value objects so the gateway
dispatches on type instead of poking at raw dicts. Outbound frames are plain
JSON-ready dicts:

- control frames are flat: {"type": "pong", "timestamp": ...}
- domain events are envelopes: {"type": ..., "data": {...}, "timestamp": ...}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

from ws_gateway.components.core.constants import InboundKind, OutboundKind


class InvalidFrameError(ValueError):
    """Inbound frame is not a JSON object."""


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Inbound frames
# =============================================================================


@dataclass(frozen=True, slots=True)
class AuthenticateFrame:
    token: Any


@dataclass(frozen=True, slots=True)
class PingFrame:
    pass


@dataclass(frozen=True, slots=True)
class SubscribeFrame:
    topic: Any


@dataclass(frozen=True, slots=True)
class UnknownFrame:
    kind: Any


InboundFrame = Union[AuthenticateFrame, PingFrame, SubscribeFrame, UnknownFrame]


def parse_inbound(raw: str) -> InboundFrame:
    """
    Parse a text frame from a client.

    Raises:
        InvalidFrameError: The text is not JSON or not a JSON object.
    """
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidFrameError("Invalid message format") from e
    if not isinstance(message, dict):
        raise InvalidFrameError("Invalid message format")

    kind = message.get("type")
    if kind == InboundKind.AUTHENTICATE:
        token = message.get("token")
        # Only an absent or empty token counts as missing; anything else is verified
        return AuthenticateFrame(token=None if token in (None, "") else token)
    if kind == InboundKind.PING:
        return PingFrame()
    if kind == InboundKind.SUBSCRIBE:
        return SubscribeFrame(topic=message.get("topic"))
    return UnknownFrame(kind=kind)


# =============================================================================
# Outbound frames
# =============================================================================


def connected_frame(connection_id: str) -> dict[str, Any]:
    return {"type": OutboundKind.CONNECTED, "connectionId": connection_id, "timestamp": utc_timestamp()}


def authenticated_frame(user_id: str) -> dict[str, Any]:
    return {"type": OutboundKind.AUTHENTICATED, "userId": user_id}


def auth_error_frame(message: str) -> dict[str, Any]:
    return {"type": OutboundKind.AUTH_ERROR, "message": message}


def pong_frame() -> dict[str, Any]:
    return {"type": OutboundKind.PONG, "timestamp": utc_timestamp()}


def subscribed_frame(topic: Any) -> dict[str, Any]:
    return {"type": OutboundKind.SUBSCRIBED, "topic": topic, "timestamp": utc_timestamp()}


def error_frame(message: str) -> dict[str, Any]:
    return {"type": OutboundKind.ERROR, "message": message}


def event_envelope(event_type: str, data: dict[str, Any]) -> dict[str, Any]:
    """Wrap a domain payload as {type, data, timestamp}."""
    return {"type": event_type, "data": data, "timestamp": utc_timestamp()}
