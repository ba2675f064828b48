"""
Tests for ComboStructureService and the declarative sync planner.
"""

import pytest
from sqlalchemy import func, select

from rest_api.models import ComboGroup, ComboGroupItem, combo_group_category_hint
from rest_api.repositories import ComboRepository
from rest_api.services.domain import ComboStructureService
from rest_api.services.domain.reconcile import Existing, New, plan_sync
from shared.utils.combo_schemas import ComboGroupPayload
from shared.utils.exceptions import ComboErrorKind, ComboValidationError, DatabaseError


def payloads(*groups: dict) -> list[ComboGroupPayload]:
    return [ComboGroupPayload.model_validate(g) for g in groups]


def count(db, target) -> int:
    return db.scalar(select(func.count()).select_from(target))


@pytest.fixture
def combo_with_groups(factory, restaurant, dish_a, dish_b):
    """A combo with Mains (Dish A, Dish B) and Drinks (Dish B), Mains hinted to a category."""
    combo = factory.combo(restaurant)
    mains = factory.group(combo, "Mains", 1, 2, position=0)
    drinks = factory.group(combo, "Drinks", 0, 1, position=1)
    item_a = factory.item(mains, dish_a, extra_price=100, position=0)
    item_b = factory.item(mains, dish_b, position=1)
    factory.item(drinks, dish_b)
    category = factory.category(restaurant)
    factory.db.execute(
        combo_group_category_hint.insert().values(combo_group_id=mains.id, category_id=category.id)
    )
    factory.db.commit()
    return combo, mains, drinks, item_a, item_b, category


class TestPlanSync:
    """Pure planning of create/update/delete sets."""

    def _entry(self, entry_id=None):
        return ComboGroupPayload(id=entry_id, name="G", allowed_min=0, allowed_max=1)

    def test_empty_payload_deletes_everything(self):
        plan = plan_sync([1, 2], [])

        assert plan.delete_ids == [1, 2]
        assert plan.entries == []

    def test_payload_without_ids_replaces_all(self):
        plan = plan_sync([1, 2], [self._entry(), self._entry()])

        assert plan.delete_ids == [1, 2]
        assert all(isinstance(e, New) for e in plan.entries)

    def test_ids_select_rows_to_keep(self):
        plan = plan_sync([1, 2, 3], [self._entry(2)])

        assert plan.delete_ids == [1, 3]
        assert plan.entries == [Existing(id=2, fields=self._entry(2), position=0)]

    def test_mixed_payload_creates_idless_entries(self):
        plan = plan_sync([1, 2], [self._entry(1), self._entry()])

        assert plan.delete_ids == [2]
        assert isinstance(plan.entries[0], Existing)
        assert isinstance(plan.entries[1], New)
        assert plan.entries[1].position == 1

    def test_unknown_id_is_created(self):
        plan = plan_sync([1], [self._entry(99)])

        assert plan.delete_ids == [1]
        assert plan.entries == [New(fields=self._entry(99), position=0)]


class TestReconcileGroups:

    def test_builds_structure_for_new_combo(self, db_session, factory, restaurant, dish_a, dish_b):
        combo = factory.combo(restaurant)
        category = factory.category(restaurant)

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {
                "name": "Mains", "allowed_min": 1, "allowed_max": 2,
                "category_hint_ids": [category.id],
                "items": [{"dish_id": dish_a.id, "extra_price": 250}, {"dish_id": dish_b.id}],
            },
            {"name": "Drinks", "allowed_min": 0, "allowed_max": 1},
        ))

        assert [g.name for g in result.groups] == ["Mains", "Drinks"]
        mains = result.groups[0]
        assert mains.category_hint_ids == [category.id]
        assert [(i.dish_id, i.extra_price) for i in mains.items] == [(dish_a.id, 250), (dish_b.id, 0)]
        assert mains.items[0].dish.options[0].name == "Extra Sauce"
        assert result.groups[1].items == []

    def test_empty_payload_purges_groups_items_and_hints(self, db_session, combo_with_groups):
        combo = combo_with_groups[0]

        result = ComboStructureService(db_session).reconcile(combo, [])

        assert result.groups == []
        assert count(db_session, ComboGroup) == 0
        assert count(db_session, ComboGroupItem) == 0
        assert count(db_session, combo_group_category_hint) == 0

    def test_payload_without_ids_replaces_all_groups(self, db_session, combo_with_groups, dish_a):
        combo, mains, drinks = combo_with_groups[:3]

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {"name": "Mains", "allowed_min": 1, "allowed_max": 1, "items": [{"dish_id": dish_a.id}]},
        ))

        assert len(result.groups) == 1
        assert result.groups[0].id not in {mains.id, drinks.id}
        assert result.groups[0].id > max(mains.id, drinks.id)
        assert count(db_session, ComboGroup) == 1
        assert count(db_session, ComboGroupItem) == 1

    def test_selective_update_keeps_and_edits_referenced_groups(self, db_session, combo_with_groups):
        combo, mains, drinks, item_a, item_b, category = combo_with_groups

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {"id": mains.id, "name": "Main Course", "allowed_min": 2, "allowed_max": 2},
        ))

        assert [g.id for g in result.groups] == [mains.id]
        group = result.groups[0]
        assert (group.name, group.allowed_min, group.allowed_max) == ("Main Course", 2, 2)
        # Keys not supplied leave items and hints untouched
        assert [i.id for i in group.items] == [item_a.id, item_b.id]
        assert group.category_hint_ids == [category.id]
        assert db_session.get(ComboGroup, drinks.id) is None

    def test_mixed_ids_create_duplicate_instead_of_matching_by_name(self, db_session, combo_with_groups):
        combo, mains, drinks = combo_with_groups[:3]

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {"id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2},
            {"name": "Mains", "allowed_min": 1, "allowed_max": 2},
        ))

        assert [g.name for g in result.groups] == ["Mains", "Mains"]
        assert result.groups[0].id == mains.id
        assert result.groups[1].id not in {mains.id, drinks.id}
        assert result.groups[1].items == []
        assert db_session.get(ComboGroup, drinks.id) is None

    def test_group_order_follows_payload(self, db_session, combo_with_groups):
        combo, mains, drinks = combo_with_groups[:3]

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {"id": drinks.id, "name": "Drinks", "allowed_min": 0, "allowed_max": 1},
            {"id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2},
        ))

        assert [g.id for g in result.groups] == [drinks.id, mains.id]

    def test_records_acting_user(self, db_session, combo_with_groups):
        combo, mains = combo_with_groups[:2]

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {"id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2},
            {"name": "Desserts", "allowed_min": 0, "allowed_max": 1},
        ), user_id=10)

        assert result.groups[0].updated_by_id == 10
        assert result.groups[1].created_by_id == 10


class TestReconcileHintsAndItems:

    def test_empty_hint_list_detaches_all(self, db_session, combo_with_groups):
        combo, mains = combo_with_groups[:2]

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {"id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2, "category_hint_ids": []},
        ))

        assert result.groups[0].category_hint_ids == []
        assert count(db_session, combo_group_category_hint) == 0

    def test_item_ids_keep_and_update_referenced_items(self, db_session, combo_with_groups):
        combo, mains, _, item_a, item_b, _ = combo_with_groups

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {
                "id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2,
                "items": [{"id": item_b.id, "dish_id": item_b.dish_id, "extra_price": 700}],
            },
        ))

        items = result.groups[0].items
        assert [(i.id, i.extra_price) for i in items] == [(item_b.id, 700)]
        assert db_session.get(ComboGroupItem, item_a.id) is None

    def test_omitted_extra_price_resets_to_zero(self, db_session, combo_with_groups):
        combo, mains, _, item_a, _, _ = combo_with_groups

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {
                "id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2,
                "items": [{"id": item_a.id, "dish_id": item_a.dish_id}],
            },
        ))

        item = result.groups[0].items[0]
        assert item.id == item_a.id
        assert item.extra_price == 0

    def test_items_without_ids_replace_group_items(self, db_session, combo_with_groups, dish_c):
        combo, mains, _, item_a, item_b, _ = combo_with_groups

        result = ComboStructureService(db_session).reconcile(combo, payloads(
            {
                "id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2,
                "items": [{"dish_id": dish_c.id}],
            },
        ))

        items = result.groups[0].items
        assert [i.dish_id for i in items] == [dish_c.id]
        assert items[0].id not in {item_a.id, item_b.id}
        assert items[0].id > max(item_a.id, item_b.id)

    def test_empty_item_list_clears_group(self, db_session, combo_with_groups):
        combo, mains, drinks = combo_with_groups[:3]

        ComboStructureService(db_session).reconcile(combo, payloads(
            {"id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2, "items": []},
            {"id": drinks.id, "name": "Drinks", "allowed_min": 0, "allowed_max": 1},
        ))

        assert count(db_session, ComboGroupItem) == 1


class TestReconcileAtomicity:

    def test_unknown_dish_aborts_without_writes(self, db_session, combo_with_groups):
        combo, mains, drinks = combo_with_groups[:3]

        with pytest.raises(ComboValidationError) as exc_info:
            ComboStructureService(db_session).reconcile(combo, payloads(
                {"name": "New", "allowed_min": 0, "allowed_max": 1, "items": [{"dish_id": 987654}]},
            ))

        assert exc_info.value.kinds == [ComboErrorKind.STRUCTURE_REFERENTIAL_ERROR]
        assert exc_info.value.detail["errors"] == {
            "groups.0.items.0.dish_id": ["The selected dish does not exist."]
        }
        reloaded = ComboRepository(db_session).reload(combo.id)
        assert [g.id for g in reloaded.groups] == [mains.id, drinks.id]
        assert count(db_session, ComboGroupItem) == 3

    def test_unknown_category_is_reported_per_field(self, db_session, combo_with_groups):
        combo, mains = combo_with_groups[:2]

        with pytest.raises(ComboValidationError) as exc_info:
            ComboStructureService(db_session).reconcile(combo, payloads(
                {"id": mains.id, "name": "Mains", "allowed_min": 1, "allowed_max": 2,
                 "category_hint_ids": [555555]},
            ))

        assert list(exc_info.value.detail["errors"]) == ["groups.0.category_hint_ids.0"]

    def test_persistence_failure_rolls_back_every_write(self, db_session, combo_with_groups, dish_a, monkeypatch):
        combo, mains, drinks = combo_with_groups[:3]
        service = ComboStructureService(db_session)

        def failing_upsert_item(*args, **kwargs):
            raise RuntimeError("simulated insert failure")

        monkeypatch.setattr(service._repo, "upsert_item", failing_upsert_item)

        with pytest.raises(DatabaseError):
            service.reconcile(combo, payloads(
                {"name": "Replacement", "allowed_min": 1, "allowed_max": 1,
                 "items": [{"dish_id": dish_a.id}]},
            ))

        reloaded = ComboRepository(db_session).reload(combo.id)
        assert [g.id for g in reloaded.groups] == [mains.id, drinks.id]
        assert count(db_session, ComboGroup) == 2
        assert count(db_session, ComboGroupItem) == 3
        assert count(db_session, combo_group_category_hint) == 1


class TestPayloadValidation:

    def test_max_below_min_is_rejected(self):
        with pytest.raises(ValueError):
            ComboGroupPayload(name="Mains", allowed_min=2, allowed_max=1)

    def test_duplicate_dish_in_group_is_rejected(self):
        with pytest.raises(ValueError):
            ComboGroupPayload.model_validate({
                "name": "Mains", "allowed_min": 0, "allowed_max": 2,
                "items": [{"dish_id": 1}, {"dish_id": 1}],
            })

    def test_negative_extra_price_is_rejected(self):
        with pytest.raises(ValueError):
            ComboGroupPayload.model_validate({
                "name": "Mains", "allowed_min": 0, "allowed_max": 1,
                "items": [{"dish_id": 1, "extra_price": -5}],
            })
