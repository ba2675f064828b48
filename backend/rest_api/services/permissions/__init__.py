"""
Explicit actor capabilities and typed authorization decisions.

Usage:
    from rest_api.services.permissions import Actor, Denied, can_manage_combo

    actor = Actor.from_claims(ctx)
    decision = can_manage_combo(actor, combo.restaurant)
    if isinstance(decision, Denied):
        raise ForbiddenError("edit this combo", reason=decision.reason)
"""

from .actor import Actor
from .policy import Allowed, Denied, Decision, can_manage_combo

__all__ = [
    "Actor",
    "Allowed",
    "Denied",
    "Decision",
    "can_manage_combo",
]
