"""
Centralized constants for the combo engine.

Usage:
    from shared.config.constants import PricingMode, Roles

    if combo.pricing_mode == PricingMode.HYBRID:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants (as issued in JWT claims)."""

    ADMIN: Final[str] = "admin"
    RESTAURANT: Final[str] = "restaurant"
    CUSTOMER: Final[str] = "customer"


# Roles allowed to edit combo structures
MANAGEMENT_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN, Roles.RESTAURANT})


# =============================================================================
# Combo Pricing
# =============================================================================


class PricingMode(str, Enum):
    """How a combo's total is derived from the customer's selection."""

    FIXED = "FIXED"  # base_price + options
    DYNAMIC = "DYNAMIC"  # sum of chosen dish prices + options
    HYBRID = "HYBRID"  # base_price + per-item extras + options


# Modes where the combo's base_price contributes to the total
BASE_PRICED_MODES: Final[frozenset[PricingMode]] = frozenset(
    {PricingMode.FIXED, PricingMode.HYBRID}
)


class Limits:
    """Input size limits for combo payloads."""

    MAX_GROUPS_PER_COMBO: Final[int] = 50
    MAX_ITEMS_PER_GROUP: Final[int] = 200
    MAX_NAME_LENGTH: Final[int] = 255
