"""
Utilities module: Exceptions and schemas.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
    RateLimitedError,
)
from shared.utils.schemas import CamelModel

__all__ = [
    # exceptions
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "RateLimitedError",
    # schemas
    "CamelModel",
]
