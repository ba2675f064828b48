"""
Combo Repository - Data access for the combo aggregate.

Exposes explicit group/item/hint operations so the structure reconciler
never relies on ORM relationship sync helpers.
"""

from typing import Sequence
from sqlalchemy.orm import selectinload, joinedload
from sqlalchemy import Select, select, delete, insert

from rest_api.models import (
    Combo,
    ComboGroup,
    ComboGroupItem,
    Dish,
    MenuCategory,
    combo_group_category_hint,
)
from .base import BaseRepository


class ComboRepository(BaseRepository[Combo]):
    """
    Repository for Combo aggregates.

    Guarantees eager loading of:
    - restaurant
    - groups -> category_hints
    - groups -> items -> dish -> options
    """

    @property
    def model(self) -> type[Combo]:
        return Combo

    def _base_query(self) -> Select:
        return (
            select(Combo)
            .options(joinedload(Combo.restaurant))
            .options(
                selectinload(Combo.groups)
                .selectinload(ComboGroup.category_hints)
            )
            .options(
                selectinload(Combo.groups)
                .selectinload(ComboGroup.items)
                .joinedload(ComboGroupItem.dish)
                .selectinload(Dish.options)
            )
        )

    def find_all(
        self,
        restaurant_id: int | None = None,
        available: bool | None = None,
    ) -> Sequence[Combo]:
        """
        Find active combos, optionally narrowed by restaurant and availability.

        Args:
            restaurant_id: Only combos of this restaurant
            available: Only combos with this availability flag

        Returns:
            Combos ordered by id, with the full structure loaded
        """
        query = self._base_query().where(Combo.is_active.is_(True))

        if restaurant_id is not None:
            query = query.where(Combo.restaurant_id == restaurant_id)
        if available is not None:
            query = query.where(Combo.available.is_(available))

        return self._db.execute(query.order_by(Combo.id)).scalars().unique().all()

    def reload(self, combo_id: int) -> Combo | None:
        """Re-read the aggregate, overwriting any stale identity-map state."""
        query = (
            self._base_query()
            .where(Combo.id == combo_id)
            .execution_options(populate_existing=True)
        )
        return self._db.execute(query).scalars().unique().one_or_none()

    # =========================================================================
    # Groups
    # =========================================================================

    def list_groups(self, combo_id: int) -> Sequence[ComboGroup]:
        query = (
            select(ComboGroup)
            .where(ComboGroup.combo_id == combo_id)
            .order_by(ComboGroup.position, ComboGroup.id)
        )
        return self._db.execute(query).scalars().all()

    def delete_groups(self, group_ids: list[int]) -> None:
        """Delete groups together with their items and hint links."""
        if not group_ids:
            return

        self._db.execute(
            delete(ComboGroupItem).where(ComboGroupItem.combo_group_id.in_(group_ids))
        )
        self._db.execute(
            delete(combo_group_category_hint).where(
                combo_group_category_hint.c.combo_group_id.in_(group_ids)
            )
        )
        self._db.execute(delete(ComboGroup).where(ComboGroup.id.in_(group_ids)))

    def upsert_group(
        self,
        combo_id: int,
        group: ComboGroup | None,
        *,
        name: str,
        allowed_min: int,
        allowed_max: int,
        position: int,
    ) -> ComboGroup:
        """Update `group` in place, or create a new one when it is None."""
        if group is None:
            group = ComboGroup(combo_id=combo_id)
            self._db.add(group)

        group.name = name
        group.allowed_min = allowed_min
        group.allowed_max = allowed_max
        group.position = position
        self._db.flush()
        return group

    def replace_category_hints(self, group_id: int, category_ids: list[int]) -> None:
        """Replace the group's hint links with exactly `category_ids`."""
        self._db.execute(
            delete(combo_group_category_hint).where(
                combo_group_category_hint.c.combo_group_id == group_id
            )
        )
        unique_ids = list(dict.fromkeys(category_ids))
        if unique_ids:
            self._db.execute(
                insert(combo_group_category_hint),
                [{"combo_group_id": group_id, "category_id": cid} for cid in unique_ids],
            )

    # =========================================================================
    # Items
    # =========================================================================

    def list_items(self, group_id: int) -> Sequence[ComboGroupItem]:
        query = (
            select(ComboGroupItem)
            .where(ComboGroupItem.combo_group_id == group_id)
            .order_by(ComboGroupItem.position, ComboGroupItem.id)
        )
        return self._db.execute(query).scalars().all()

    def delete_items(self, item_ids: list[int]) -> None:
        if not item_ids:
            return
        self._db.execute(delete(ComboGroupItem).where(ComboGroupItem.id.in_(item_ids)))

    def upsert_item(
        self,
        group_id: int,
        item: ComboGroupItem | None,
        *,
        dish_id: int,
        extra_price: int,
        position: int,
    ) -> ComboGroupItem:
        """Update `item` in place, or create a new one when it is None."""
        if item is None:
            item = ComboGroupItem(combo_group_id=group_id)
            self._db.add(item)

        item.dish_id = dish_id
        item.extra_price = extra_price
        item.position = position
        self._db.flush()
        return item

    # =========================================================================
    # Referential lookups
    # =========================================================================

    def existing_dish_ids(self, dish_ids: set[int]) -> set[int]:
        if not dish_ids:
            return set()
        query = select(Dish.id).where(Dish.id.in_(dish_ids))
        return set(self._db.execute(query).scalars().all())

    def existing_category_ids(self, category_ids: set[int]) -> set[int]:
        if not category_ids:
            return set()
        query = select(MenuCategory.id).where(MenuCategory.id.in_(category_ids))
        return set(self._db.execute(query).scalars().all())

