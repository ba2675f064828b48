"""
Repository Pattern implementation.
Centralizes data access with guaranteed eager loading.

Usage:
    from rest_api.repositories import ComboRepository

    repo = ComboRepository(db)
    combo = repo.find_by_id(123)
    groups = repo.list_groups(combo.id)
"""

from .base import BaseRepository
from .combo import ComboRepository
from .selection import ComboSelectionRepository

__all__ = [
    "BaseRepository",
    "ComboRepository",
    "ComboSelectionRepository",
]
