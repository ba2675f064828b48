"""
Domain Services - Clean Architecture Application Layer.

Services contain business logic and own the transaction boundary.
They use Repositories for data access.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import ComboPricingService

    # In router
    result = ComboPricingService(db).calculate(combo_id, request)
"""

from .combo_service import ComboService
from .combo_structure_service import ComboStructureService
from .combo_pricing_service import ComboPricingService, price_combo
from .combo_selection_service import ComboSelectionService
from .orderable import (
    DishOrderable,
    ComboSelectionOrderable,
    Orderable,
    OrderablePricer,
    PricedOrderLine,
    orderable_from_line,
)

__all__ = [
    # Combo structure
    "ComboService",
    "ComboStructureService",
    # Pricing and selections
    "ComboPricingService",
    "ComboSelectionService",
    "price_combo",
    # Orderables
    "DishOrderable",
    "ComboSelectionOrderable",
    "Orderable",
    "OrderablePricer",
    "PricedOrderLine",
    "orderable_from_line",
]
