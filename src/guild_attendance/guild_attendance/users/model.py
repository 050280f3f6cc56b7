from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a staff account.

    Note: Plain data object, no DB access code here.
    """

    user_id: int
    username: str
    password_hash: str
    role: Role
    email: Optional[str] = None


@dataclass(frozen=True)
class AssignedMain:
    main_id: int
    name: str

    def to_dict(self) -> dict:
        return {"mainID": self.main_id, "name": self.name}


@dataclass(frozen=True)
class Identity:
    """Who is calling: loaded from storage on every authenticated request."""

    user_id: int
    username: str
    role: Role
    email: Optional[str] = None
    assigned_mains: tuple[AssignedMain, ...] = field(default_factory=tuple)

    @property
    def assigned_main_ids(self) -> frozenset[int]:
        return frozenset(m.main_id for m in self.assigned_mains)

    def to_dict(self) -> dict:
        return {
            "userID": self.user_id,
            "username": self.username,
            "email": self.email,
            "roleName": self.role.value,
            "assignedMains": [m.to_dict() for m in self.assigned_mains],
        }
