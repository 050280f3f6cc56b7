from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MainEvent
from .repository import MainRepository


class MySQLMainRepository(MainRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[MainEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT main_id, name, description FROM mains ORDER BY name")
            rows = fetchall(cur)
            return [
                MainEvent(main_id=int(r["main_id"]), name=r["name"], description=r.get("description"))
                for r in rows
            ]

    def get_by_id(self, main_id: int) -> Optional[MainEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT main_id, name, description FROM mains WHERE main_id=%s", (int(main_id),))
            r = fetchone(cur)
            if not r:
                return None
            return MainEvent(main_id=int(r["main_id"]), name=r["name"], description=r.get("description"))
