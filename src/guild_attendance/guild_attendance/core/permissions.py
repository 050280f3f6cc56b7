"""Role capability table and row-level access rules.

Every decision here is pure: callers pass in the identity they loaded for the
current request (and, for handlers, a fresh assignment lookup) so nothing is
cached between requests.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class RoleCapabilities:
    view_all_attendance: bool
    record_attendance: bool
    requires_assignment: bool
    view_all_reports: bool
    manage_users: bool


CAPABILITIES: dict[Role, RoleCapabilities] = {
    Role.OWNER: RoleCapabilities(
        view_all_attendance=True,
        record_attendance=True,
        requires_assignment=False,
        view_all_reports=True,
        manage_users=True,
    ),
    Role.ELDER: RoleCapabilities(
        view_all_attendance=True,
        record_attendance=True,
        requires_assignment=False,
        view_all_reports=True,
        manage_users=True,
    ),
    Role.MODERATOR: RoleCapabilities(
        view_all_attendance=True,
        record_attendance=True,
        requires_assignment=False,
        view_all_reports=False,
        manage_users=False,
    ),
    Role.HANDLER: RoleCapabilities(
        view_all_attendance=False,
        record_attendance=True,
        requires_assignment=True,
        view_all_reports=False,
        manage_users=False,
    ),
}

USER_MANAGER_ROLES = tuple(role for role, caps in CAPABILITIES.items() if caps.manage_users)


class Caller(Protocol):
    user_id: int
    role: Role


def capabilities_for(role: Role) -> RoleCapabilities:
    return CAPABILITIES[Role(role)]


def attendance_scope(caller: Caller) -> Optional[int]:
    """Return the handler id whose assignments restrict the rows, or None for full access."""
    if capabilities_for(caller.role).view_all_attendance:
        return None
    return int(caller.user_id)


def ensure_can_record(caller: Caller, main_id: int, is_assigned: Callable[[int, int], bool]) -> None:
    """Check create/delete permission on attendance rows of ``main_id``.

    ``is_assigned(user_id, main_id)`` is only consulted for roles that need an assignment.
    """
    caps = capabilities_for(caller.role)
    if not caps.record_attendance:
        raise AuthorizationError("Insufficient permissions")
    if caps.requires_assignment and not is_assigned(int(caller.user_id), int(main_id)):
        raise AuthorizationError("You are not assigned to this main")


def report_owner_filter(caller: Caller, target_user_id: Optional[int] = None) -> Optional[int]:
    """User id the shift-report rows must belong to; None means every user."""
    if capabilities_for(caller.role).view_all_reports:
        return int(target_user_id) if target_user_id is not None else None
    return int(caller.user_id)


def ensure_can_manage_users(caller: Caller) -> None:
    if not capabilities_for(caller.role).manage_users:
        raise AuthorizationError("Insufficient permissions")
