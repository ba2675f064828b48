"""
Combo Selection Domain Service.

Records a pricing result as an immutable ComboSelection snapshot.
"""

from sqlalchemy.orm import Session

from shared.config.logging import combo_logger as logger, mask_user_id
from shared.utils.combo_schemas import (
    ComboCalculationRequest,
    ComboLineItem,
    ComboPricingResult,
)
from shared.utils.exceptions import NotFoundError
from rest_api.models import ComboSelection
from rest_api.repositories import ComboSelectionRepository
from rest_api.services.base_service import BaseService
from .combo_pricing_service import ComboPricingService


def snapshot_options(line: ComboLineItem) -> dict:
    """Denormalized capture of a line, readable without the live combo or dish."""
    return {
        "group_id": line.group_id,
        "group_name": line.group_name,
        "option_ids": list(line.option_ids),
        "options": [option.model_dump() for option in line.options],
        "dish_base_price": line.dish_base_price,
        "combo_item_extra": line.combo_item_extra,
    }


class ComboSelectionService(BaseService):
    """
    Domain service for recording priced selections.

    The header and every item are written in one transaction; a failure on
    any insert leaves no trace of the selection.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self._repo = ComboSelectionRepository(db)
        self._pricing = ComboPricingService(db)

    def calculate_and_record(
        self,
        combo_id: int,
        request: ComboCalculationRequest,
        user_id: int | None = None,
    ) -> ComboSelection:
        """Price the selection, then record it."""
        result = self._pricing.calculate(combo_id, request)
        return self.record(result, user_id)

    def record(self, result: ComboPricingResult, user_id: int | None = None) -> ComboSelection:
        """
        Persist `result` as a ComboSelection with one item per priced line.

        Returns the selection reloaded with items -> dish -> options.

        Raises:
            DatabaseError: If any insert fails (nothing is persisted).
        """
        selection_id = self._in_transaction(
            "record combo selection",
            lambda: self._write(result, user_id),
            combo_id=result.combo_id,
        )

        logger.info(
            "Combo selection recorded",
            selection_id=selection_id,
            combo_id=result.combo_id,
            user=mask_user_id(user_id),
            total=result.total,
        )
        return self.get(selection_id)

    def get(self, selection_id: int) -> ComboSelection:
        selection = self._repo.find_by_id(selection_id)
        if selection is None:
            raise NotFoundError("Combo selection", selection_id)
        return selection

    def _write(self, result: ComboPricingResult, user_id: int | None) -> int:
        selection = self._repo.add_selection(
            combo_id=result.combo_id,
            user_id=user_id,
            total_price=result.total,
        )
        for position, line in enumerate(result.items):
            self._repo.add_item(
                selection.id,
                dish_id=line.dish_id,
                price=line.line_total,
                options=snapshot_options(line),
                position=position,
            )
        return selection.id
