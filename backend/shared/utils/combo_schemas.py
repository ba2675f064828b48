"""
Pydantic schemas for combo structure, pricing and selection endpoints.

Monetary fields are integers in the smallest currency unit.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.config.constants import Limits, PricingMode


PricingModeLiteral = Literal["FIXED", "DYNAMIC", "HYBRID"]


# =============================================================================
# Catalog (read-only) Outputs
# =============================================================================


class DishOptionOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    extra_cost: int
    required: bool


class DishOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    price: int
    available: bool
    options: list[DishOptionOutput] = []


# =============================================================================
# Combo Structure Payloads
# =============================================================================


class ComboItemPayload(BaseModel):
    """
    A group item: create when `id` is absent, update when it matches.

    extra_price is part of the complete desired state; omitting it means 0.
    """

    id: int | None = None
    dish_id: int
    extra_price: int = Field(default=0, ge=0)


class ComboGroupPayload(BaseModel):
    """
    A group descriptor inside a nested structure payload.

    `category_hint_ids` and `items` are only synchronized when supplied;
    an empty list clears them, an omitted (or null) key leaves them untouched.
    """

    id: int | None = None
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    allowed_min: int = Field(ge=0)
    allowed_max: int = Field(ge=0)
    category_hint_ids: list[int] | None = None
    items: list[ComboItemPayload] | None = Field(
        default=None, max_length=Limits.MAX_ITEMS_PER_GROUP
    )

    @model_validator(mode="after")
    def check_bounds_and_items(self) -> "ComboGroupPayload":
        if self.allowed_max < self.allowed_min:
            raise ValueError(
                "The maximum selection must be greater than or equal to the minimum for this group."
            )
        if self.items:
            dish_ids = [item.dish_id for item in self.items]
            if len(dish_ids) != len(set(dish_ids)):
                raise ValueError("A dish may appear at most once in a group.")
        return self


class ComboCreate(BaseModel):
    restaurant_id: int
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = None
    pricing_mode: PricingModeLiteral = PricingMode.FIXED.value
    base_price: int = Field(default=0, ge=0)
    available: bool = True
    groups: list[ComboGroupPayload] | None = Field(
        default=None, max_length=Limits.MAX_GROUPS_PER_COMBO
    )

    @field_validator("pricing_mode", mode="before")
    @classmethod
    def upper_pricing_mode(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class ComboUpdate(BaseModel):
    """Partial update. `groups` is reconciled only when the key is present."""

    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = None
    pricing_mode: PricingModeLiteral | None = None
    base_price: int | None = Field(default=None, ge=0)
    available: bool | None = None
    groups: list[ComboGroupPayload] | None = Field(
        default=None, max_length=Limits.MAX_GROUPS_PER_COMBO
    )

    @field_validator("pricing_mode", mode="before")
    @classmethod
    def upper_pricing_mode(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


# =============================================================================
# Combo Structure Outputs
# =============================================================================


class ComboGroupItemOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    combo_group_id: int
    dish_id: int
    extra_price: int
    dish: DishOutput


class ComboGroupOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    combo_id: int
    name: str
    allowed_min: int
    allowed_max: int
    category_hint_ids: list[int] = []
    items: list[ComboGroupItemOutput] = []


class ComboOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    description: str | None = None
    pricing_mode: PricingModeLiteral
    base_price: int
    available: bool
    groups: list[ComboGroupOutput] = []


# =============================================================================
# Pricing
# =============================================================================


class DishSelectionPayload(BaseModel):
    dish_id: int
    option_ids: list[int] = []


class GroupSelectionPayload(BaseModel):
    group_id: int
    selected: list[DishSelectionPayload]


class ComboCalculationRequest(BaseModel):
    """Customer selection: which dishes (and options) per group."""

    groups: list[GroupSelectionPayload] = Field(
        min_length=1, max_length=Limits.MAX_GROUPS_PER_COMBO
    )


class SelectedOptionOutput(BaseModel):
    id: int
    name: str
    extra_cost: int


class ComboLineItem(BaseModel):
    """One priced dish choice."""

    group_id: int
    group_name: str
    dish_id: int
    dish_name: str
    dish_base_price: int
    combo_item_extra: int
    applied_extra: int
    option_ids: list[int]
    options: list[SelectedOptionOutput]
    options_total: int
    line_total: int


class ComboPriceBreakdown(BaseModel):
    combo_base: int = 0
    dish_base: int = 0
    dish_surcharges: int = 0
    options_surcharges: int = 0


class ComboPricingResult(BaseModel):
    combo_id: int
    pricing_mode: PricingModeLiteral
    total: int
    breakdown: ComboPriceBreakdown
    items: list[ComboLineItem]


# =============================================================================
# Selection Snapshot Outputs
# =============================================================================


class ComboSelectionItemOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    combo_selection_id: int
    dish_id: int
    price: int
    options: dict[str, Any]
    dish: DishOutput


class ComboSelectionOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    combo_id: int
    user_id: int | None = None
    total_price: int
    created_at: datetime | None = None
    items: list[ComboSelectionItemOutput] = []


# =============================================================================
# Order Lines
# =============================================================================


class OrderLineInput(BaseModel):
    """
    An order line referencing either a dish or a recorded combo selection.

    `type` is inferred from `combo_selection_id` when omitted.
    """

    type: Literal["dish", "combo"]
    dish_id: int | None = None
    combo_selection_id: int | None = None
    quantity: int = Field(ge=1)

    @model_validator(mode="before")
    @classmethod
    def infer_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("type"):
            data = dict(data)
            data["type"] = "combo" if data.get("combo_selection_id") else "dish"
        return data

    @model_validator(mode="after")
    def check_reference(self) -> "OrderLineInput":
        if self.type == "dish" and self.dish_id is None:
            raise ValueError("dish_id is required for dish lines")
        if self.type == "combo" and self.combo_selection_id is None:
            raise ValueError("combo_selection_id is required for combo lines")
        return self
