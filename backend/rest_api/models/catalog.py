"""
Catalog Models: Restaurant, MenuCategory, Dish, DishOption.

These tables are owned by the catalog service. The combo engine only
reads them (dish prices and options, category hints, restaurant ownership).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .combo import Combo


class Restaurant(AuditMixin, Base):
    """A restaurant and its owning user."""

    __tablename__ = "restaurant"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    owner_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    dishes: Mapped[list["Dish"]] = relationship(back_populates="restaurant")
    combos: Mapped[list["Combo"]] = relationship(back_populates="restaurant")


class MenuCategory(AuditMixin, Base):
    """Menu category, used by combo groups as an advisory hint."""

    __tablename__ = "menu_category"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)


class Dish(AuditMixin, Base):
    """A dish with its base price in minor currency units."""

    __tablename__ = "dish"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("menu_category.id"), index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="dishes")
    options: Mapped[list["DishOption"]] = relationship(
        back_populates="dish", order_by="DishOption.id"
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_dish_price_non_negative"),
    )


class DishOption(AuditMixin, Base):
    """A selectable extra-cost option of a single dish."""

    __tablename__ = "dish_option"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    dish_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("dish.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    extra_cost: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    dish: Mapped["Dish"] = relationship(back_populates="options")

    __table_args__ = (
        CheckConstraint("extra_cost >= 0", name="chk_dish_option_extra_cost_non_negative"),
    )
