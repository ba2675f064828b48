"""
Orderables: what an order line can reference.

An order line points at either a catalog dish or a recorded combo
selection. The unit price always comes from the server-side record, never
from the client.
"""

from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.utils.combo_schemas import OrderLineInput
from shared.utils.exceptions import NotFoundError, ValidationError
from rest_api.models import Dish
from rest_api.repositories import ComboSelectionRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class DishOrderable:
    dish_id: int


@dataclass(frozen=True)
class ComboSelectionOrderable:
    selection_id: int


Orderable = Union[DishOrderable, ComboSelectionOrderable]


@dataclass(frozen=True)
class PricedOrderLine:
    orderable: Orderable
    quantity: int
    unit_price: int

    @property
    def total_price(self) -> int:
        return self.unit_price * self.quantity


def orderable_from_line(line: OrderLineInput) -> Orderable:
    """Map a validated order-line payload onto its orderable variant."""
    if line.type == "combo":
        return ComboSelectionOrderable(selection_id=line.combo_selection_id)
    return DishOrderable(dish_id=line.dish_id)


class OrderablePricer:
    """Resolves the immutable unit price of an orderable for one order."""

    def __init__(self, db: Session):
        self._db = db
        self._selections = ComboSelectionRepository(db)

    def unit_price(self, orderable: Orderable, restaurant_id: int, user_id: int | None) -> int:
        """
        Unit price of `orderable` for an order of `user_id` at `restaurant_id`.

        Raises:
            NotFoundError: If the dish or selection does not exist.
            ValidationError: If it belongs to another restaurant or user,
                or the dish is unavailable.
        """
        if isinstance(orderable, ComboSelectionOrderable):
            return self._combo_selection_price(orderable, restaurant_id, user_id)
        return self._dish_price(orderable, restaurant_id)

    def price_line(self, line: OrderLineInput, restaurant_id: int, user_id: int | None) -> PricedOrderLine:
        orderable = orderable_from_line(line)
        return PricedOrderLine(
            orderable=orderable,
            quantity=line.quantity,
            unit_price=self.unit_price(orderable, restaurant_id, user_id),
        )

    def _dish_price(self, orderable: DishOrderable, restaurant_id: int) -> int:
        dish = self._db.get(Dish, orderable.dish_id)
        if dish is None:
            raise NotFoundError("Dish", orderable.dish_id)
        if dish.restaurant_id != restaurant_id:
            raise ValidationError(
                "One or more dishes do not belong to this restaurant.",
                dish_id=dish.id,
                restaurant_id=restaurant_id,
            )
        if not dish.available:
            raise ValidationError(f"Dish '{dish.name}' is currently unavailable.", dish_id=dish.id)
        return dish.price

    def _combo_selection_price(
        self,
        orderable: ComboSelectionOrderable,
        restaurant_id: int,
        user_id: int | None,
    ) -> int:
        selection = self._selections.find_by_id(orderable.selection_id)
        if selection is None:
            raise NotFoundError("Combo selection", orderable.selection_id)
        if selection.combo.restaurant_id != restaurant_id:
            raise ValidationError(
                "Selected combo does not belong to this restaurant.",
                selection_id=selection.id,
                restaurant_id=restaurant_id,
            )
        if selection.user_id is not None and selection.user_id != user_id:
            raise ValidationError(
                "You cannot use a combo selection that was not created by you.",
                selection_id=selection.id,
            )
        return selection.total_price
