"""
Utilities module: Exceptions and schemas.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ComboValidationError,
    ComboViolation,
    ComboErrorKind,
    DatabaseError,
)

__all__ = [
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ComboValidationError",
    "ComboViolation",
    "ComboErrorKind",
    "DatabaseError",
]
