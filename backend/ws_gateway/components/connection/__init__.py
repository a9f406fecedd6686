"""Connection tracking for the WebSocket gateway."""

from ws_gateway.components.connection.registry import (
    Connection,
    ConnectionRegistry,
    generate_connection_id,
)
from ws_gateway.components.connection.monitor import run_connection_monitor

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "generate_connection_id",
    "run_connection_monitor",
]
