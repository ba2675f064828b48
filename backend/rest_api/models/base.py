"""
Base class and AuditMixin for all SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# BIGINT identity on server databases; SQLite only auto-increments INTEGER PRIMARY KEY
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class CreatedAtMixin:
    """Creation timestamp only, for append-only records."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class AuditMixin(CreatedAtMixin):
    """
    Mixin providing soft delete flag and audit trail fields.

    Fields added:
    - is_active: Soft delete flag (False = deleted, True = active)
    - created_at, updated_at: Audit timestamps
    - created_by_id, updated_by_id: User tracking
    """

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    # No FK to users: the user table is owned by the auth service
    created_by_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    updated_by_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    def set_created_by(self, user_id: int | None) -> None:
        """Set created_by fields on new entity."""
        self.created_by_id = user_id

    def set_updated_by(self, user_id: int | None) -> None:
        """Set updated_by fields on entity update."""
        self.updated_by_id = user_id
        self.updated_at = datetime.now(timezone.utc)

    def soft_delete(self, user_id: int | None) -> None:
        """Mark the entity deleted, keeping the row for existing references."""
        self.is_active = False
        self.set_updated_by(user_id)

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        id_val = getattr(self, "id", None)
        active = "active" if self.is_active else "deleted"
        return f"<{class_name}(id={id_val}, {active})>"
