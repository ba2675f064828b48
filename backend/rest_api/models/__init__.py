"""
SQLAlchemy ORM Models Package.

Models are organized into domain-specific modules:
- base: Base class, AuditMixin, CreatedAtMixin
- catalog: Restaurant, MenuCategory, Dish, DishOption (read-only here)
- combo: Combo, ComboGroup, ComboGroupItem, combo_group_category_hint
- selection: ComboSelection, ComboSelectionItem
"""

# Base classes
from .base import Base, AuditMixin, CreatedAtMixin

# Catalog (owned by the catalog service)
from .catalog import Restaurant, MenuCategory, Dish, DishOption

# Combo structure
from .combo import Combo, ComboGroup, ComboGroupItem, combo_group_category_hint

# Priced selection snapshots
from .selection import ComboSelection, ComboSelectionItem

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    "CreatedAtMixin",
    # Catalog
    "Restaurant",
    "MenuCategory",
    "Dish",
    "DishOption",
    # Combo
    "Combo",
    "ComboGroup",
    "ComboGroupItem",
    "combo_group_category_hint",
    # Selection
    "ComboSelection",
    "ComboSelectionItem",
]
