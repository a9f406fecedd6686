"""
Dependencies shared by the routers: the caller's identity and the
WebSocket event handlers created by the application factory.
"""

from typing import Any

from fastapi import Depends, Request

from shared.security.auth import current_user_context, is_admin
from ws_gateway.components.events.handlers import WebSocketEventHandlers


def get_event_handlers(request: Request) -> WebSocketEventHandlers:
    """Handlers bound to this application's gateway (see create_app)."""
    return request.app.state.event_handlers


def get_user_id(user: dict[str, Any]) -> str:
    """Get user ID from the JWT context."""
    return str(user["sub"])


def get_viewer(user: dict[str, Any] = Depends(current_user_context)) -> tuple[str, bool]:
    """(user_id, is_admin) of the caller."""
    return get_user_id(user), is_admin(user)
