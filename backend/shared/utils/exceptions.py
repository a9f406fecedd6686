"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ConflictError

    raise NotFoundError("Forum post", post_id)
    raise ForbiddenError("edit this post")
    raise ConflictError("You have already reported this post")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 403 Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("moderate forum posts")
        raise ForbiddenError("read this message", user_id=user_id)
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class InsufficientRoleError(ForbiddenError):
    """User doesn't have the required role."""

    def __init__(self, required_roles: list[str], **log_context: Any):
        roles_str = ", ".join(required_roles)
        super().__init__(
            f"perform this action (requires role: {roles_str})",
            required_roles=required_roles,
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Forum post", post_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class PostNotFoundError(NotFoundError):
    """Forum post not found (or not visible to the caller)."""

    def __init__(self, post_id: str | None = None, **log_context: Any):
        super().__init__("Forum post", post_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Poll option does not exist", option_id=option_id)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("You have already reported this post")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 429 Rate Limiting Errors
# =============================================================================


class RateLimitedError(AppException):
    """Rate limit exceeded (429)."""

    def __init__(self, retry_after: int, context: str | None = None, **log_context: Any):
        detail = f"Too many requests. Try again in {retry_after} seconds."
        if context:
            detail = f"{context}: {detail}"

        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            log_level="warning",
            headers={"Retry-After": str(retry_after)},
            retry_after=retry_after,
            **log_context,
        )
