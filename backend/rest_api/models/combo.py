"""
Combo Models: Combo, ComboGroup, ComboGroupItem and the category hint link.

A combo owns an ordered set of groups; each group owns an ordered set of
items referencing dishes. Mutated only by the structure reconciler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId
from .catalog import Dish, MenuCategory

if TYPE_CHECKING:
    from .catalog import Restaurant
    from .selection import ComboSelection


# Advisory links between a group and menu categories (not enforced at pricing time)
combo_group_category_hint = Table(
    "combo_group_category_hint",
    Base.metadata,
    Column(
        "combo_group_id",
        BigInteger,
        ForeignKey("combo_group.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        BigInteger,
        ForeignKey("menu_category.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Combo(AuditMixin, Base):
    """
    A restaurant-defined product assembled from selectable groups of dishes.

    base_price only contributes in FIXED and HYBRID modes.
    """

    __tablename__ = "combo"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    pricing_mode: Mapped[str] = mapped_column(Text, default="FIXED", nullable=False)
    base_price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="combos")
    groups: Mapped[list["ComboGroup"]] = relationship(
        back_populates="combo",
        order_by=lambda: [ComboGroup.position, ComboGroup.id],
    )
    selections: Mapped[list["ComboSelection"]] = relationship(back_populates="combo")

    __table_args__ = (
        CheckConstraint(
            "pricing_mode IN ('FIXED', 'DYNAMIC', 'HYBRID')",
            name="chk_combo_pricing_mode",
        ),
        CheckConstraint("base_price >= 0", name="chk_combo_base_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Combo(id={self.id}, name='{self.name}', mode={self.pricing_mode})>"


class ComboGroup(AuditMixin, Base):
    """A named selection slot with inclusive [allowed_min, allowed_max] bounds."""

    __tablename__ = "combo_group"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    combo_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("combo.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    allowed_min: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    allowed_max: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    combo: Mapped["Combo"] = relationship(back_populates="groups")
    items: Mapped[list["ComboGroupItem"]] = relationship(
        back_populates="group",
        order_by=lambda: [ComboGroupItem.position, ComboGroupItem.id],
    )
    category_hints: Mapped[list["MenuCategory"]] = relationship(
        secondary=combo_group_category_hint,
        order_by=MenuCategory.id,
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint("allowed_min >= 0", name="chk_combo_group_min_non_negative"),
        CheckConstraint("allowed_max >= allowed_min", name="chk_combo_group_max_gte_min"),
        # Deleted group ids must never be handed out again
        {"sqlite_autoincrement": True},
    )

    @property
    def category_hint_ids(self) -> list[int]:
        return [category.id for category in self.category_hints]

    def __repr__(self) -> str:
        return (
            f"<ComboGroup(id={self.id}, name='{self.name}', "
            f"min={self.allowed_min}, max={self.allowed_max})>"
        )


class ComboGroupItem(AuditMixin, Base):
    """
    A dish made selectable within one group.
    extra_price is only charged in HYBRID mode.
    """

    __tablename__ = "combo_group_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    combo_group_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("combo_group.id"), nullable=False, index=True
    )
    dish_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("dish.id"), nullable=False, index=True
    )
    extra_price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    group: Mapped["ComboGroup"] = relationship(back_populates="items")
    dish: Mapped["Dish"] = relationship()

    __table_args__ = (
        CheckConstraint("extra_price >= 0", name="chk_combo_group_item_extra_non_negative"),
        # Lookup by (group, dish) during pricing; uniqueness is checked on input
        Index("ix_combo_group_item_group_dish", "combo_group_id", "dish_id"),
        {"sqlite_autoincrement": True},
    )
