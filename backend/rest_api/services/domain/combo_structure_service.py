"""
Combo Structure Domain Service.

Synchronizes a combo's groups, group items and category hints with a
nested payload describing the complete desired state.
"""

from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.utils.combo_schemas import ComboGroupPayload
from shared.utils.exceptions import (
    ComboErrorKind,
    ComboValidationError,
    ComboViolation,
)
from rest_api.models import Combo, ComboGroup, ComboGroupItem
from rest_api.repositories import ComboRepository
from rest_api.services.base_service import BaseService
from .reconcile import Existing, plan_sync

logger = get_logger(__name__)


class ComboStructureService(BaseService):
    """
    Reconciles the persisted Combo aggregate with a desired structure.

    The whole reconciliation runs in one transaction: referential errors
    are detected before any write, and any failure rolls back every write.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self._repo = ComboRepository(db)

    def reconcile(
        self,
        combo: Combo,
        groups: list[ComboGroupPayload],
        user_id: int | None = None,
    ) -> Combo:
        """
        Apply `groups` to `combo` and commit.

        Returns the combo reloaded with groups -> items -> dish -> options.

        Raises:
            ComboValidationError: If a dish or category reference is unknown.
            DatabaseError: If persistence fails.
        """
        combo_id = combo.id
        self._in_transaction(
            "reconcile combo structure",
            lambda: self.apply(combo_id, groups, user_id),
            combo_id=combo_id,
        )
        logger.info("Combo structure reconciled", combo_id=combo_id, groups=len(groups))
        return self._repo.reload(combo_id)

    def apply(
        self,
        combo_id: int,
        groups: list[ComboGroupPayload],
        user_id: int | None = None,
    ) -> None:
        """
        Stage the reconciliation without committing.

        Callers that compose this with other writes own the commit.
        """
        self.validate_references(groups)

        existing = {g.id: g for g in self._repo.list_groups(combo_id)}
        plan = plan_sync(list(existing), groups)

        self._repo.delete_groups(plan.delete_ids)
        if plan.delete_ids:
            logger.debug("Combo groups deleted", combo_id=combo_id, group_ids=plan.delete_ids)

        for entry in plan.entries:
            payload = entry.fields
            current = existing[entry.id] if isinstance(entry, Existing) else None
            group = self._repo.upsert_group(
                combo_id,
                current,
                name=payload.name,
                allowed_min=payload.allowed_min,
                allowed_max=payload.allowed_max,
                position=entry.position,
            )
            self._stamp(group, user_id, created=current is None)

            if payload.category_hint_ids is not None:
                self._repo.replace_category_hints(group.id, payload.category_hint_ids)

            if payload.items is not None:
                self._sync_items(group, payload, user_id)

    def validate_references(self, groups: list[ComboGroupPayload]) -> None:
        """
        Ensure every referenced dish and category exists.

        Raises:
            ComboValidationError: With one StructureReferentialError per bad reference.
        """
        dish_ids = {item.dish_id for g in groups for item in (g.items or [])}
        category_ids = {cid for g in groups for cid in (g.category_hint_ids or [])}

        known_dishes = self._repo.existing_dish_ids(dish_ids)
        known_categories = self._repo.existing_category_ids(category_ids)

        violations: list[ComboViolation] = []
        for g_index, group in enumerate(groups):
            for c_index, category_id in enumerate(group.category_hint_ids or []):
                if category_id not in known_categories:
                    violations.append(ComboViolation(
                        ComboErrorKind.STRUCTURE_REFERENTIAL_ERROR,
                        "The selected category hint does not exist.",
                        field=f"groups.{g_index}.category_hint_ids.{c_index}",
                    ))
            for i_index, item in enumerate(group.items or []):
                if item.dish_id not in known_dishes:
                    violations.append(ComboViolation(
                        ComboErrorKind.STRUCTURE_REFERENTIAL_ERROR,
                        "The selected dish does not exist.",
                        field=f"groups.{g_index}.items.{i_index}.dish_id",
                    ))

        if violations:
            raise ComboValidationError(violations)

    def _sync_items(
        self,
        group: ComboGroup,
        payload: ComboGroupPayload,
        user_id: int | None,
    ) -> None:
        existing = {item.id: item for item in self._repo.list_items(group.id)}
        plan = plan_sync(list(existing), payload.items or [])

        self._repo.delete_items(plan.delete_ids)

        for entry in plan.entries:
            current = existing[entry.id] if isinstance(entry, Existing) else None
            item = self._repo.upsert_item(
                group.id,
                current,
                dish_id=entry.fields.dish_id,
                extra_price=entry.fields.extra_price,
                position=entry.position,
            )
            self._stamp(item, user_id, created=current is None)

    @staticmethod
    def _stamp(entity: ComboGroup | ComboGroupItem, user_id: int | None, created: bool) -> None:
        if created:
            entity.set_created_by(user_id)
        else:
            entity.set_updated_by(user_id)
