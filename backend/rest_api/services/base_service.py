"""
Base Service Classes for Clean Architecture.

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Services own the transaction boundary: repositories only stage and flush,
the service commits once per operation or rolls everything back.

Usage:
    from rest_api.services.base_service import BaseService

    class ComboStructureService(BaseService):
        def reconcile(self, combo, groups, actor):
            return self._in_transaction(
                "reconcile combo structure",
                lambda: self._apply(combo.id, groups, actor.user_id),
                combo_id=combo.id,
            )
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from sqlalchemy.orm import Session

from shared.infrastructure.db import safe_commit
from shared.config.logging import get_logger
from shared.utils.exceptions import AppException, DatabaseError

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")


class BaseService:
    """
    Base class for domain services.

    Provides the database session and a single-commit transaction helper.
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    def _in_transaction(
        self,
        operation: str,
        work: Callable[[], ResultT],
        **log_context: Any,
    ) -> ResultT:
        """
        Run `work` and commit, or roll back every write it staged.

        Application errors (validation, not found) propagate unchanged;
        any other failure is logged and surfaced as DatabaseError.
        """
        try:
            result = work()
            safe_commit(self._db)
        except AppException:
            self._db.rollback()
            raise
        except Exception as e:
            self._db.rollback()
            logger.error(f"Failed to {operation}", error=str(e), **log_context)
            raise DatabaseError(operation, **log_context) from e

        return result
