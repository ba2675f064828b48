"""
Selection Models: ComboSelection, ComboSelectionItem.

Append-only priced snapshots. Rows are written once by the selection
recorder and never updated.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BigIntId, CreatedAtMixin

if TYPE_CHECKING:
    from .catalog import Dish
    from .combo import Combo


class ComboSelection(CreatedAtMixin, Base):
    """A customer's priced combo choices, orderable as a single line."""

    __tablename__ = "combo_selection"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    combo_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("combo.id"), nullable=False, index=True
    )
    # Nullable: anonymous customers may record selections
    user_id: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)

    combo: Mapped["Combo"] = relationship(back_populates="selections")
    items: Mapped[list["ComboSelectionItem"]] = relationship(
        back_populates="selection",
        order_by=lambda: [ComboSelectionItem.position, ComboSelectionItem.id],
    )

    __table_args__ = (
        CheckConstraint("total_price >= 0", name="chk_combo_selection_total_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ComboSelection(id={self.id}, combo_id={self.combo_id}, total={self.total_price})>"


class ComboSelectionItem(CreatedAtMixin, Base):
    """
    One priced dish choice within a selection.

    options holds a denormalized capture of the calculation (group, chosen
    options, dish base price, combo item extra) so the snapshot is readable
    without joining the live combo or dish.
    """

    __tablename__ = "combo_selection_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    combo_selection_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("combo_selection.id"), nullable=False, index=True
    )
    dish_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("dish.id"), nullable=False, index=True
    )
    options_json: Mapped[Optional[str]] = mapped_column("options", Text)  # JSON object as string
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    selection: Mapped["ComboSelection"] = relationship(back_populates="items")
    dish: Mapped["Dish"] = relationship()

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_combo_selection_item_price_non_negative"),
    )

    @property
    def options(self) -> dict[str, Any]:
        return json.loads(self.options_json) if self.options_json else {}

    @options.setter
    def options(self, value: dict[str, Any]) -> None:
        self.options_json = json.dumps(value, sort_keys=True)
