"""
Combo Pricing Domain Service.

Validates a customer's selection against a combo's configured groups and
prices it under the combo's pricing mode. Read-only and deterministic: the
same combo state and payload always produce the same result.
"""

from sqlalchemy.orm import Session

from shared.config.constants import BASE_PRICED_MODES, PricingMode
from shared.config.logging import get_logger
from shared.utils.combo_schemas import (
    ComboCalculationRequest,
    ComboLineItem,
    ComboPriceBreakdown,
    ComboPricingResult,
    DishSelectionPayload,
    SelectedOptionOutput,
)
from shared.utils.exceptions import (
    ComboErrorKind,
    ComboValidationError,
    ComboViolation,
    NotFoundError,
)
from rest_api.models import Combo, ComboGroup, ComboGroupItem
from rest_api.repositories import ComboRepository

logger = get_logger(__name__)


def line_total_for_mode(
    mode: PricingMode,
    dish_price: int,
    applied_extra: int,
    options_total: int,
) -> int:
    """Price of one chosen dish under `mode`."""
    if mode == PricingMode.FIXED:
        return options_total
    if mode == PricingMode.HYBRID:
        return applied_extra + options_total
    return dish_price + options_total


def total_for_mode(mode: PricingMode, breakdown: ComboPriceBreakdown) -> int:
    """Grand total under `mode` from the aggregated breakdown."""
    if mode == PricingMode.FIXED:
        return breakdown.combo_base + breakdown.options_surcharges
    if mode == PricingMode.HYBRID:
        return breakdown.combo_base + breakdown.dish_surcharges + breakdown.options_surcharges
    return breakdown.dish_base + breakdown.options_surcharges


def price_combo(combo: Combo, request: ComboCalculationRequest) -> ComboPricingResult:
    """
    Price `request` against a combo loaded with groups -> items -> dish -> options.

    Violations found in the same phase are collected and raised together.
    The required-group check only runs once every payload group resolved
    cleanly, since it depends on the set of recognized group ids.

    Raises:
        ComboValidationError: If the selection violates the combo rules.
    """
    mode = PricingMode(combo.pricing_mode)
    groups_by_id = {group.id: group for group in combo.groups}

    violations: list[ComboViolation] = []
    lines: list[ComboLineItem] = []
    selected_group_ids: set[int] = set()

    for group_selection in request.groups:
        group = groups_by_id.get(group_selection.group_id)
        if group is None:
            violations.append(ComboViolation(
                ComboErrorKind.GROUP_NOT_IN_COMBO,
                "Selected group is not part of this combo.",
            ))
            continue

        selected_group_ids.add(group.id)

        count = len(group_selection.selected)
        if count < group.allowed_min or count > group.allowed_max:
            violations.append(ComboViolation(
                ComboErrorKind.SELECTION_COUNT_OUT_OF_RANGE,
                f"You must select between {group.allowed_min} and "
                f"{group.allowed_max} item(s) in {group.name}.",
            ))

        for dish_selection in group_selection.selected:
            line = _price_line(mode, group, dish_selection, violations)
            if line is not None:
                lines.append(line)

    if not violations:
        for group in combo.groups:
            if group.allowed_min > 0 and group.id not in selected_group_ids:
                violations.append(ComboViolation(
                    ComboErrorKind.REQUIRED_GROUP_NOT_SELECTED,
                    f"Group {group.name} requires at least {group.allowed_min} item(s).",
                ))

    if violations:
        raise ComboValidationError(violations, combo_id=combo.id)

    breakdown = ComboPriceBreakdown(
        combo_base=combo.base_price if mode in BASE_PRICED_MODES else 0,
        dish_base=sum(line.dish_base_price for line in lines),
        dish_surcharges=sum(line.combo_item_extra for line in lines),
        options_surcharges=sum(line.options_total for line in lines),
    )

    return ComboPricingResult(
        combo_id=combo.id,
        pricing_mode=mode.value,
        total=total_for_mode(mode, breakdown),
        breakdown=breakdown,
        items=lines,
    )


def _resolve_item(group: ComboGroup, dish_id: int) -> ComboGroupItem | None:
    for item in group.items:
        if item.dish_id == dish_id:
            return item
    return None


def _price_line(
    mode: PricingMode,
    group: ComboGroup,
    dish_selection: DishSelectionPayload,
    violations: list[ComboViolation],
) -> ComboLineItem | None:
    group_item = _resolve_item(group, dish_selection.dish_id)
    if group_item is None:
        violations.append(ComboViolation(
            ComboErrorKind.DISH_NOT_IN_GROUP,
            "Dish is not allowed inside this combo group.",
        ))
        return None

    dish = group_item.dish
    dish_options = {option.id: option for option in dish.options}

    # Repeated option ids are charged once
    option_ids = list(dict.fromkeys(dish_selection.option_ids))
    selected_options: list[SelectedOptionOutput] = []
    for option_id in option_ids:
        option = dish_options.get(option_id)
        if option is None:
            violations.append(ComboViolation(
                ComboErrorKind.OPTION_NOT_ON_DISH,
                "Selected option is not available for the chosen dish.",
            ))
            return None
        selected_options.append(SelectedOptionOutput(
            id=option.id,
            name=option.name,
            extra_cost=option.extra_cost,
        ))

    options_total = sum(option.extra_cost for option in selected_options)
    applied_extra = group_item.extra_price if mode == PricingMode.HYBRID else 0

    return ComboLineItem(
        group_id=group.id,
        group_name=group.name,
        dish_id=dish.id,
        dish_name=dish.name,
        dish_base_price=dish.price,
        combo_item_extra=group_item.extra_price,
        applied_extra=applied_extra,
        option_ids=option_ids,
        options=selected_options,
        options_total=options_total,
        line_total=line_total_for_mode(mode, dish.price, applied_extra, options_total),
    )


class ComboPricingService:
    """Domain service for combo price calculation."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = ComboRepository(db)

    def calculate(self, combo_id: int, request: ComboCalculationRequest) -> ComboPricingResult:
        """
        Load the combo with groups -> items -> dish -> options and price it.

        Raises:
            NotFoundError: If the combo does not exist.
            ComboValidationError: If the selection violates the combo rules.
        """
        combo = self._repo.find_by_id(combo_id)
        if combo is None:
            raise NotFoundError("Combo", combo_id)

        result = price_combo(combo, request)
        logger.debug(
            "Combo priced",
            combo_id=combo.id,
            pricing_mode=result.pricing_mode,
            lines=len(result.items),
            total=result.total,
        )
        return result
