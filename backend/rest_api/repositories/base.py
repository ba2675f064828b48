"""
Base Repository implementation.
Provides common data access patterns with guaranteed eager loading.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic
from sqlalchemy.orm import Session
from sqlalchemy import Select


ModelT = TypeVar("ModelT")


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: Return the SQLAlchemy model class
    - _base_query(): Return base query with eager loading

    Repositories never commit; the calling service owns the transaction.
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    @abstractmethod
    def _base_query(self) -> Select:
        """
        Return base query with proper eager loading.
        Subclasses must implement this with selectinload/joinedload.
        """
        ...

    def find_by_id(
        self,
        entity_id: int,
        include_deleted: bool = False,
    ) -> ModelT | None:
        """
        Find entity by ID.

        Args:
            entity_id: Entity ID
            include_deleted: Include soft-deleted entities

        Returns:
            Entity or None
        """
        query = self._base_query().where(self.model.id == entity_id)

        if not include_deleted and hasattr(self.model, "is_active"):
            query = query.where(self.model.is_active.is_(True))

        return self._db.execute(query).scalars().unique().one_or_none()

    def save(self, entity: ModelT) -> ModelT:
        """
        Stage entity (insert or update) and flush to obtain its ID.

        Args:
            entity: Entity to save

        Returns:
            Saved entity
        """
        self._db.add(entity)
        self._db.flush()
        return entity

