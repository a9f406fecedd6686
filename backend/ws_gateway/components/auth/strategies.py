"""
Token verification for the WebSocket gateway.

The gateway authenticates a connection when the client sends an
`authenticate` frame. Verification is pluggable: anything with a
`verify(token)` method returning `{"userId": ...}` and raising on an
invalid token can be handed to the gateway.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import HTTPException

from shared.config.logging import get_logger
from shared.security.auth import verify_jwt
from ws_gateway.components.core.constants import WSCloseCode

logger = get_logger(__name__)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    Result of authentication attempt.

    Attributes:
        success: Whether authentication succeeded.
        user_id: Authenticated user id if successful.
        error_message: Message sent to the client in the auth_error frame.
        close_code: WebSocket close code to use if failed.
        audit_reason: Short reason code for audit logging.
    """

    success: bool
    user_id: str | None = None
    error_message: str | None = None
    close_code: int = WSCloseCode.POLICY_VIOLATION
    audit_reason: str | None = None

    @classmethod
    def ok(cls, user_id: str) -> "AuthResult":
        return cls(success=True, user_id=user_id)

    @classmethod
    def fail(cls, message: str, audit_reason: str = "auth_failed") -> "AuthResult":
        return cls(success=False, error_message=message, audit_reason=audit_reason)


# =============================================================================
# Verifiers
# =============================================================================


class TokenVerifier(Protocol):
    """Verifies a bearer token and returns {"userId": str}. Raises if invalid."""

    def verify(self, token: str) -> dict[str, Any]: ...


class InvalidTokenError(Exception):
    """Raised by verifiers for a token that does not authenticate anyone."""


class JWTTokenVerifier:
    """
    Verifies access tokens issued by the REST API.

    Uses the same HS256 secret, issuer and audience as the HTTP
    `current_user_context` dependency.
    """

    def verify(self, token: str) -> dict[str, Any]:
        try:
            claims = verify_jwt(token)
        except HTTPException as e:
            raise InvalidTokenError(e.detail) from e
        return {"userId": str(claims["sub"]), "role": claims.get("role")}


def authenticate_token(verifier: TokenVerifier, token: Any) -> AuthResult:
    """Run a verifier and fold its outcome into an AuthResult."""
    if not isinstance(token, str):
        logger.info("WebSocket token rejected", reason="token is not a string")
        return AuthResult.fail("Invalid authentication token", audit_reason="invalid_token")
    try:
        identity = verifier.verify(token)
    except InvalidTokenError as e:
        logger.info("WebSocket token rejected", reason=str(e))
        return AuthResult.fail("Invalid authentication token", audit_reason="invalid_token")
    except Exception as e:
        # Third-party verifiers raise their own error types
        logger.warning("WebSocket token verification error", error=str(e), error_type=type(e).__name__)
        return AuthResult.fail("Invalid authentication token", audit_reason="verifier_error")

    user_id = identity.get("userId") if isinstance(identity, dict) else None
    if not user_id:
        return AuthResult.fail("Invalid authentication token", audit_reason="missing_user_id")
    return AuthResult.ok(str(user_id))
