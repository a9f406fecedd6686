"""
Security module: JWT verification and role checks.
"""

from shared.security.auth import (
    sign_jwt,
    sign_user_token,
    verify_jwt,
    current_user_context,
    admin_user_context,
    require_roles,
    is_admin,
)

__all__ = [
    "sign_jwt",
    "sign_user_token",
    "verify_jwt",
    "current_user_context",
    "admin_user_context",
    "require_roles",
    "is_admin",
]
