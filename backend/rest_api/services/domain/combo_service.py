"""
Combo Domain Service.

Creates, lists, updates, reads and deletes combos. Structure changes are
delegated to ComboStructureService and committed together with the header.
"""

from typing import Sequence

from sqlalchemy.orm import Session

from shared.config.logging import combo_logger as logger, mask_user_id
from shared.utils.combo_schemas import ComboCreate, ComboUpdate
from shared.utils.exceptions import NotFoundError
from rest_api.models import Combo, Restaurant
from rest_api.repositories import ComboRepository
from rest_api.services.base_service import BaseService
from rest_api.services.permissions import Actor, Denied, can_manage_combo
from .combo_structure_service import ComboStructureService

# Header fields that cannot be cleared with an explicit null
_NON_NULLABLE_FIELDS = {"name", "pricing_mode", "base_price", "available"}


class ComboService(BaseService):
    """
    Domain service for combo headers and their structure.

    Mutating operations take an explicit Actor and return Denied instead of
    raising when the actor may not manage the combo's restaurant.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self._repo = ComboRepository(db)
        self._structure = ComboStructureService(db)

    def get(self, combo_id: int) -> Combo:
        """
        Get a combo with groups -> category hints and groups -> items -> dish -> options.

        Raises:
            NotFoundError: If the combo does not exist.
        """
        combo = self._repo.find_by_id(combo_id)
        if combo is None:
            raise NotFoundError("Combo", combo_id)
        return combo

    def list_all(
        self,
        restaurant_id: int | None = None,
        available: bool | None = None,
    ) -> Sequence[Combo]:
        """List active combos, optionally filtered by restaurant and availability."""
        return self._repo.find_all(restaurant_id=restaurant_id, available=available)

    def create(self, data: ComboCreate, actor: Actor) -> Combo | Denied:
        restaurant = self._db.get(Restaurant, data.restaurant_id)
        if restaurant is None or not restaurant.is_active:
            raise NotFoundError("Restaurant", data.restaurant_id)

        decision = can_manage_combo(actor, restaurant)
        if isinstance(decision, Denied):
            return decision

        def work() -> int:
            combo = Combo(
                restaurant_id=restaurant.id,
                name=data.name,
                description=data.description,
                pricing_mode=data.pricing_mode,
                base_price=data.base_price,
                available=data.available,
            )
            combo.set_created_by(actor.user_id)
            self._repo.save(combo)
            if data.groups is not None:
                self._structure.apply(combo.id, data.groups, actor.user_id)
            return combo.id

        combo_id = self._in_transaction(
            "create combo",
            work,
            restaurant_id=restaurant.id,
        )

        logger.info(
            "Combo created",
            combo_id=combo_id,
            restaurant_id=restaurant.id,
            user=mask_user_id(actor.user_id),
        )
        return self._repo.reload(combo_id)

    def update(self, combo_id: int, data: ComboUpdate, actor: Actor) -> Combo | Denied:
        """
        Update supplied header fields; reconcile groups only when `groups` is present.

        `groups: []` deletes every group of the combo.
        """
        combo = self.get(combo_id)

        decision = can_manage_combo(actor, combo.restaurant)
        if isinstance(decision, Denied):
            return decision

        changes = data.model_dump(exclude_unset=True, exclude={"groups"})
        groups = data.groups if "groups" in data.model_fields_set else None

        def work() -> None:
            for field_name, value in changes.items():
                if value is None and field_name in _NON_NULLABLE_FIELDS:
                    continue
                setattr(combo, field_name, value)
            combo.set_updated_by(actor.user_id)
            self._db.flush()
            if groups is not None:
                self._structure.apply(combo.id, groups, actor.user_id)

        self._in_transaction("update combo", work, combo_id=combo_id)

        logger.info(
            "Combo updated",
            combo_id=combo_id,
            fields=sorted(changes),
            groups_reconciled=groups is not None,
            user=mask_user_id(actor.user_id),
        )
        return self._repo.reload(combo_id)

    def delete_combo(self, combo_id: int, actor: Actor) -> None | Denied:
        """
        Delete a combo.

        Groups, their items and hint links are removed; the combo row itself
        is soft deleted so recorded selections keep their reference.

        Raises:
            NotFoundError: If the combo does not exist.
        """
        combo = self.get(combo_id)

        decision = can_manage_combo(actor, combo.restaurant)
        if isinstance(decision, Denied):
            return decision

        def work() -> None:
            group_ids = [group.id for group in self._repo.list_groups(combo_id)]
            self._repo.delete_groups(group_ids)
            combo.soft_delete(actor.user_id)
            self._db.flush()

        self._in_transaction("delete combo", work, combo_id=combo_id)

        logger.info(
            "Combo deleted",
            combo_id=combo_id,
            user=mask_user_id(actor.user_id),
        )
        return None
