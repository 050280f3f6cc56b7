from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_int, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..mains.repository import MainRepository
from .model import Identity, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def parse_role(value: Optional[str]) -> Role:
    name = require_non_empty(value, "Role")
    try:
        return Role(name.lower())
    except ValueError:
        raise ValidationError("Invalid role specified")


class AuthService:
    """Use case: authenticate a user (login) and rebuild the caller's identity."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _identity_for(self, user: User) -> Identity:
        return Identity(
            user_id=user.user_id,
            username=user.username,
            role=user.role,
            email=user.email,
            assigned_mains=tuple(self._users.get_assigned_mains(user.user_id)),
        )

    def authenticate(self, username: Optional[str], password: Optional[str]) -> Identity:
        if not username or not password:
            raise ValidationError("Username and password are required")
        if not isinstance(username, str) or not isinstance(password, str):
            raise ValidationError("Username and password must be strings")

        user = self._users.get_by_username(username.strip())
        if not user:
            raise AuthenticationError(INVALID_CREDENTIALS)

        try:
            ok = check_password_hash(user.password_hash, password)
        except Exception:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError(INVALID_CREDENTIALS)

        return self._identity_for(user)

    def load_identity(self, user_id: int) -> Optional[Identity]:
        user = self._users.get_by_id(int(user_id))
        if not user:
            return None
        return self._identity_for(user)


class UserService:
    """Use case: manage staff accounts (owner/elder)."""

    def __init__(self, users: UserRepository, mains: MainRepository):
        self._users = users
        self._mains = mains

    def create_account(
        self,
        *,
        username: Optional[str],
        password: Optional[str],
        email: Optional[str],
        role_name: Optional[str],
    ) -> dict:
        if not username or not password or not role_name:
            raise ValidationError("Username, password, and role are required")

        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = parse_role(role_name)

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        email = str(email or "").strip() or None
        user_id = self._users.create_user(
            username=username,
            password_hash=generate_password_hash(password),
            email=email,
            role=role,
        )
        logger.info("Created user %s (id=%s, role=%s)", username, user_id, role.value)
        return {"userID": user_id, "username": username, "email": email, "roleName": role.value}

    def promote(self, *, user_id, new_role_name: Optional[str]) -> None:
        if not user_id or not new_role_name:
            raise ValidationError("User ID and new role are required")

        uid = require_int(user_id, "User ID")
        role = parse_role(new_role_name)

        if not self._users.update_role(uid, role):
            raise NotFoundError("User not found")
        logger.info("User %s role changed to %s", uid, role.value)

    def assign_main(self, *, user_id, main_id) -> bool:
        if not user_id or not main_id:
            raise ValidationError("User ID and Main ID are required")

        uid = require_int(user_id, "User ID")
        mid = require_int(main_id, "Main ID")

        user = self._users.get_by_id(uid)
        if not user:
            raise NotFoundError("User not found")
        if user.role != Role.HANDLER:
            raise ValidationError("Only handlers can be assigned to mains")

        if not self._mains.get_by_id(mid):
            raise NotFoundError("Main not found")

        created = self._users.assign_main(uid, mid)
        logger.info("Handler %s assigned to main %s (new=%s)", uid, mid, created)
        return created

    def list_users(self) -> list[dict]:
        return list(self._users.list_with_assignments())
