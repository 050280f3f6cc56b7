from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import AssignedMain, User


class UserRepository(Protocol):
    """Repository interface for staff accounts and handler assignments.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, username: str, password_hash: str, email: Optional[str], role: Role) -> int:
        raise NotImplementedError

    def update_role(self, user_id: int, role: Role) -> bool:
        raise NotImplementedError

    def get_assigned_mains(self, user_id: int) -> Sequence[AssignedMain]:
        raise NotImplementedError

    def is_assigned(self, user_id: int, main_id: int) -> bool:
        raise NotImplementedError

    def assign_main(self, user_id: int, main_id: int) -> bool:
        """Returns False when the assignment already existed."""
        raise NotImplementedError

    def list_with_assignments(self) -> Sequence[dict]:
        raise NotImplementedError
