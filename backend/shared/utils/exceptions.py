"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Combo", combo_id)
    raise ForbiddenError("edit this combo")
    raise ComboValidationError([ComboViolation(ComboErrorKind.DISH_NOT_IN_GROUP, "...")])
"""

from dataclasses import dataclass
from enum import Enum
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
        detail: Any,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        message = detail.get("message", str(detail)) if isinstance(detail, dict) else detail
        log_fn(message, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Combo", 123)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="info",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("edit this combo", user_id=user_id)
    """

    def __init__(self, action: str | None = None, reason: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"
        if reason:
            detail = f"{detail}: {reason}"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


# =============================================================================
# 400 / 422 Validation Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Base price must not be negative", field="base_price")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="info",
            **log_context,
        )


class ComboErrorKind(str, Enum):
    """Client-correctable combo rule violations."""

    GROUP_NOT_IN_COMBO = "GroupNotInCombo"
    DISH_NOT_IN_GROUP = "DishNotInGroup"
    OPTION_NOT_ON_DISH = "OptionNotOnDish"
    SELECTION_COUNT_OUT_OF_RANGE = "SelectionCountOutOfRange"
    REQUIRED_GROUP_NOT_SELECTED = "RequiredGroupNotSelected"
    STRUCTURE_REFERENTIAL_ERROR = "StructureReferentialError"


@dataclass(frozen=True)
class ComboViolation:
    """One field-scoped violation. `field` is the error bag key."""

    kind: ComboErrorKind
    message: str
    field: str = "groups"


class ComboValidationError(AppException):
    """
    One or more combo rule violations (422).

    The response detail groups messages by field, e.g.
    {"message": "...", "errors": {"groups": ["Dish is not allowed ..."]}}.
    These are input errors: logged at info, never as system faults.
    """

    def __init__(self, violations: list[ComboViolation], **log_context: Any):
        if not violations:
            raise ValueError("ComboValidationError requires at least one violation")

        self.violations = list(violations)

        errors: dict[str, list[str]] = {}
        for violation in self.violations:
            errors.setdefault(violation.field, []).append(violation.message)

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": self.violations[0].message, "errors": errors},
            log_level="info",
            kinds=[v.kind.value for v in self.violations],
            **log_context,
        )

    @property
    def kinds(self) -> list[ComboErrorKind]:
        """Violation kinds in the order they were detected."""
        return [v.kind for v in self.violations]


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to record selection", combo_id=123)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
