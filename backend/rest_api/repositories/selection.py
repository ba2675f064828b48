"""
Combo Selection Repository - Append-only access to priced snapshots.
"""

from sqlalchemy.orm import selectinload, joinedload
from sqlalchemy import Select, select

from rest_api.models import ComboSelection, ComboSelectionItem, Dish
from .base import BaseRepository


class ComboSelectionRepository(BaseRepository[ComboSelection]):
    """
    Repository for ComboSelection snapshots.

    Guarantees eager loading of:
    - combo
    - items -> dish -> options
    """

    @property
    def model(self) -> type[ComboSelection]:
        return ComboSelection

    def _base_query(self) -> Select:
        return (
            select(ComboSelection)
            .options(joinedload(ComboSelection.combo))
            .options(
                selectinload(ComboSelection.items)
                .joinedload(ComboSelectionItem.dish)
                .selectinload(Dish.options)
            )
        )

    def add_selection(
        self,
        combo_id: int,
        user_id: int | None,
        total_price: int,
    ) -> ComboSelection:
        selection = ComboSelection(
            combo_id=combo_id,
            user_id=user_id,
            total_price=total_price,
        )
        return self.save(selection)

    def add_item(
        self,
        selection_id: int,
        *,
        dish_id: int,
        price: int,
        options: dict,
        position: int,
    ) -> ComboSelectionItem:
        item = ComboSelectionItem(
            combo_selection_id=selection_id,
            dish_id=dish_id,
            price=price,
            position=position,
        )
        item.options = options
        self._db.add(item)
        self._db.flush()
        return item

