from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AssignedMain, User
from .repository import UserRepository

_USER_COLUMNS = """
    SELECT u.user_id, u.username, u.password_hash, u.email, r.role_name
    FROM users u
    JOIN roles r ON r.id = u.role_id
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role_name"]),
        email=row.get("email"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_USER_COLUMNS + " WHERE u.user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_USER_COLUMNS + " WHERE u.username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, username: str, password_hash: str, email: Optional[str], role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, password_hash, email, role_id)
                SELECT %s, %s, %s, r.id FROM roles r WHERE r.role_name=%s
                """,
                (username, password_hash, email, role.value),
            )
            if cur.rowcount == 0:
                raise RuntimeError(f"Role row missing for {role.value!r}")
            return int(cur.lastrowid)

    def update_role(self, user_id: int, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users u
                JOIN roles r ON r.role_name=%s
                SET u.role_id = r.id
                WHERE u.user_id=%s
                """,
                (role.value, int(user_id)),
            )
            # rowcount is 0 when the role did not change, so existence decides the result.
            cur.execute("SELECT 1 AS found FROM users WHERE user_id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def get_assigned_mains(self, user_id: int) -> Sequence[AssignedMain]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT m.main_id, m.name
                FROM handler_main_assignments hma
                JOIN mains m ON m.main_id = hma.main_id
                WHERE hma.user_id=%s
                ORDER BY m.name
                """,
                (int(user_id),),
            )
            return [AssignedMain(main_id=int(r["main_id"]), name=r["name"]) for r in fetchall(cur)]

    def is_assigned(self, user_id: int, main_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM handler_main_assignments WHERE user_id=%s AND main_id=%s LIMIT 1",
                (int(user_id), int(main_id)),
            )
            return fetchone(cur) is not None

    def assign_main(self, user_id: int, main_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO handler_main_assignments(user_id, main_id) VALUES(%s,%s)",
                (int(user_id), int(main_id)),
            )
            return cur.rowcount > 0

    def list_with_assignments(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.username, u.email, r.role_name,
                       m.main_id, m.name AS main_name
                FROM users u
                LEFT JOIN roles r ON r.id = u.role_id
                LEFT JOIN handler_main_assignments hma ON hma.user_id = u.user_id
                LEFT JOIN mains m ON m.main_id = hma.main_id
                ORDER BY u.username, m.name
                """
            )
            rows = fetchall(cur)

        out: list[dict] = []
        by_id: dict[int, dict] = {}
        for r in rows:
            uid = int(r["user_id"])
            item = by_id.get(uid)
            if item is None:
                item = {
                    "userID": uid,
                    "username": r["username"],
                    "email": r.get("email"),
                    "roleName": r.get("role_name"),
                    "assignedMains": [],
                }
                by_id[uid] = item
                out.append(item)
            if r.get("main_id") is not None:
                item["assignedMains"].append({"mainID": int(r["main_id"]), "name": r["main_name"]})
        return out
