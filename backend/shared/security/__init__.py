"""
Security module: JWT authentication.
"""

from shared.security.auth import (
    sign_jwt,
    verify_jwt,
    get_bearer_token,
    current_user_context,
    optional_user_context,
)

__all__ = [
    "sign_jwt",
    "verify_jwt",
    "get_bearer_token",
    "current_user_context",
    "optional_user_context",
]
