"""
Actor capability value passed explicitly into combo operations.
"""

from dataclasses import dataclass
from typing import Any

from shared.config.constants import Roles, MANAGEMENT_ROLES


@dataclass(frozen=True)
class Actor:
    """
    Who is performing an operation.

    Built from verified JWT claims; anonymous callers have no user_id.
    """

    user_id: int | None
    role: str | None = None

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls(user_id=None, role=None)

    @classmethod
    def from_claims(cls, claims: dict[str, Any] | None) -> "Actor":
        """Build an actor from decoded token claims (None => anonymous)."""
        if not claims:
            return cls.anonymous()
        role = claims.get("role")
        return cls(
            user_id=int(claims["sub"]),
            role=role.lower() if isinstance(role, str) else None,
        )

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @property
    def is_admin(self) -> bool:
        return self.role == Roles.ADMIN

    @property
    def is_management(self) -> bool:
        return self.role in MANAGEMENT_ROLES
