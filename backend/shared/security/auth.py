"""
Authentication and authorization utilities.
JWT (HS256) access tokens for students, counselors and admins.

Token issuance policy (login, refresh, password checks) lives outside this
service; sign_jwt() exists for the dev CLI and the test-suite.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Depends, Header, HTTPException, status

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.constants import Roles
from shared.config.logging import get_logger
from shared.utils.exceptions import InsufficientRoleError

logger = get_logger(__name__)


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
) -> str:
    """
    Sign a JWT access token with the given payload.

    Args:
        payload: Claims to include in the token (sub, role, email).
        ttl_seconds: Token lifetime in seconds. Defaults to access token expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": "access",
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def sign_user_token(user_id: str, role: str, email: str | None = None, ttl_seconds: int | None = None) -> str:
    """Create an access token for a user row."""
    payload: dict[str, Any] = {"sub": str(user_id), "role": role}
    if email:
        payload["email"] = email
    return sign_jwt(payload, ttl_seconds=ttl_seconds)


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT access token.

    Args:
        token: The JWT token string.

    Returns:
        Decoded token claims.

    Raises:
        HTTPException: 401 if token is invalid, expired or missing claims.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        # Log the actual error for debugging, return a generic message to the client
        logger.warning("JWT validation failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing subject claim",
        )

    if payload.get("type", "access") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: invalid type claim",
        )

    if payload.get("role", Roles.STUDENT) not in Roles.ALL:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: unknown role",
        )

    return payload


# =============================================================================
# FastAPI dependencies
# =============================================================================


def get_bearer_token(authorization: str | None) -> str:
    """Extract the token from an Authorization: Bearer header."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization.split(" ", 1)[1].strip()


def current_user_context(
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current user context from JWT.

    Usage:
        @router.get("/protected")
        def protected_endpoint(ctx = Depends(current_user_context)):
            user_id = ctx["sub"]
            role = ctx["role"]

    Returns:
        Dict with: sub (user_id), role, email
    """
    token = get_bearer_token(authorization)
    claims = verify_jwt(token)
    claims.setdefault("role", Roles.STUDENT)
    return claims


def require_roles(ctx: dict[str, Any], allowed: list[str] | frozenset[str]) -> None:
    """
    Verify that the user has one of the allowed roles.

    Args:
        ctx: User context from current_user_context.
        allowed: Role names that are permitted.

    Raises:
        InsufficientRoleError: If user lacks required role.
    """
    if ctx.get("role") not in allowed:
        raise InsufficientRoleError(sorted(allowed), user_id=ctx.get("sub"))


def admin_user_context(ctx: dict[str, Any] = Depends(current_user_context)) -> dict[str, Any]:
    """FastAPI dependency that only lets admins through."""
    require_roles(ctx, [Roles.ADMIN])
    return ctx


def is_admin(ctx: dict[str, Any]) -> bool:
    return ctx.get("role") == Roles.ADMIN
