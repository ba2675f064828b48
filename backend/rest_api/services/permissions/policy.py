"""
Combo authorization policy.

Decisions are returned as values; routers translate Denied into a 403.
"""

from dataclasses import dataclass
from typing import Union

from rest_api.models import Restaurant
from .actor import Actor


@dataclass(frozen=True)
class Allowed:
    """The actor may perform the operation."""


@dataclass(frozen=True)
class Denied:
    """The actor may not perform the operation."""

    reason: str


Decision = Union[Allowed, Denied]


def can_manage_combo(actor: Actor, restaurant: Restaurant) -> Decision:
    """
    Decide whether `actor` may create or edit combos of `restaurant`.

    Admins manage every combo; restaurant accounts manage only combos of
    restaurants they own.
    """
    if actor.is_anonymous:
        return Denied("authentication required")

    if actor.is_admin:
        return Allowed()

    if not actor.is_management:
        return Denied("requires admin or restaurant role")

    if restaurant.owner_id != actor.user_id:
        return Denied("restaurant is owned by another user")

    return Allowed()
