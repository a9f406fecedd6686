"""
Connection Registry.

In-memory index of live gateway connections: connection id -> socket,
connection id -> authenticated user id, and user id -> connection ids.

All methods are synchronous and run on the event loop thread, so no locking
is needed between awaits.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Callable, Iterator, TYPE_CHECKING

from shared.config.logging import ws_gateway_logger as logger
from ws_gateway.components.core.constants import WSConstants, is_ws_connected

if TYPE_CHECKING:
    from fastapi import WebSocket


def generate_connection_id() -> str:
    """Random suffix followed by the current time in milliseconds, both base 16."""
    return f"{secrets.token_hex(5)}{int(time.time() * 1000):x}"


@dataclass(slots=True)
class Connection:
    """One registered socket."""

    id: str
    socket: "WebSocket"
    connected_at: float
    user_id: str | None = None
    authenticated_at: float | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_open(self) -> bool:
        return is_ws_connected(self.socket)


class ConnectionRegistry:
    """
    Registry of connections and their authenticated users.

    A user may hold several connections (one per browser tab or device).
    Lookups that feed delivery only return connections whose socket is
    still open.
    """

    def __init__(self, id_factory: Callable[[], str] = generate_connection_id):
        self._id_factory = id_factory
        self._connections: dict[str, Connection] = {}
        self._by_user: dict[str, set[str]] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def _new_id(self) -> str:
        for _ in range(WSConstants.MAX_ID_ATTEMPTS):
            connection_id = self._id_factory()
            if connection_id not in self._connections:
                return connection_id
        raise RuntimeError("Could not generate a unique connection id")

    def register(self, socket: "WebSocket") -> str:
        """Store an unauthenticated connection and return its id."""
        connection_id = self._new_id()
        self._connections[connection_id] = Connection(
            id=connection_id,
            socket=socket,
            connected_at=time.time(),
        )
        logger.debug("Connection registered", connection_id=connection_id, total=len(self._connections))
        return connection_id

    def authenticate(self, connection_id: str, user_id: str) -> bool:
        """
        Bind a user to a connection.

        Re-authentication replaces the previous binding. Returns False when
        the connection is unknown.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            return False

        previous = connection.user_id
        if previous is not None and previous != user_id:
            logger.warning(
                "Connection re-authenticated as a different user",
                connection_id=connection_id,
                previous_user_id=previous,
                user_id=user_id,
            )
            self._discard_user_index(previous, connection_id)

        connection.user_id = user_id
        connection.authenticated_at = time.time()
        self._by_user.setdefault(user_id, set()).add(connection_id)
        return True

    def unregister(self, connection_id: str) -> bool:
        """Remove a connection from every index. Safe to call twice."""
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            return False
        if connection.user_id is not None:
            self._discard_user_index(connection.user_id, connection_id)
        logger.debug("Connection unregistered", connection_id=connection_id, total=len(self._connections))
        return True

    def _discard_user_index(self, user_id: str, connection_id: str) -> None:
        ids = self._by_user.get(user_id)
        if ids is None:
            return
        ids.discard(connection_id)
        if not ids:
            del self._by_user[user_id]

    # =========================================================================
    # Lookups
    # =========================================================================

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def user_for(self, connection_id: str) -> str | None:
        connection = self._connections.get(connection_id)
        return connection.user_id if connection else None

    def connections_for_user(self, user_id: str) -> list[str]:
        """Open connection ids authenticated as user_id."""
        return [
            connection_id
            for connection_id in self._by_user.get(user_id, ())
            if self._connections[connection_id].is_open
        ]

    def all_open_connections(self) -> list[str]:
        return [c.id for c in self._connections.values() if c.is_open]

    def all_authenticated_connections(self) -> list[tuple[str, str]]:
        """(user_id, connection_id) pairs for open, authenticated connections."""
        return [
            (c.user_id, c.id)
            for c in self._connections.values()
            if c.user_id is not None and c.is_open
        ]

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))

    def stats(self) -> dict[str, int]:
        authenticated = sum(1 for c in self._connections.values() if c.is_authenticated)
        return {
            "totalConnections": len(self._connections),
            "authenticatedConnections": authenticated,
            "uniqueUsers": len(self._by_user),
        }
