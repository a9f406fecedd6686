"""Authentication for WebSocket gateway connections."""

from ws_gateway.components.auth.strategies import (
    AuthResult,
    InvalidTokenError,
    JWTTokenVerifier,
    TokenVerifier,
    authenticate_token,
)

__all__ = [
    "AuthResult",
    "InvalidTokenError",
    "JWTTokenVerifier",
    "TokenVerifier",
    "authenticate_token",
]
