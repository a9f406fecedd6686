"""Common utilities shared across routers."""

from .deps import get_event_handlers, get_user_id, get_viewer
from .pagination import Pagination, get_pagination

__all__ = [
    "get_event_handlers",
    "get_user_id",
    "get_viewer",
    "Pagination",
    "get_pagination",
]
