from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import day_bounds, now_local
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ShiftActivity, ShiftReport, ShiftStatsRow
from .repository import ShiftReportRepository

_REPORT_COLUMNS = """
    SELECT lr.logout_id, lr.user_id, lr.position, lr.date_time,
           lr.attendees_count, lr.dropped_links, lr.recruits, lr.nicknames_set,
           lr.game_handled, lr.total_score, lr.created_at, lr.updated_at,
           u.username
    FROM logout_records lr
    LEFT JOIN users u ON lr.user_id = u.user_id
"""


def _to_report(r: dict) -> ShiftReport:
    return ShiftReport(
        logout_id=int(r["logout_id"]),
        user_id=int(r["user_id"]),
        position=r["position"],
        date_time=r["date_time"],
        activity=ShiftActivity(
            attendees=int(r["attendees_count"] or 0),
            dropped_links=int(r["dropped_links"] or 0),
            recruits=int(r["recruits"] or 0),
            nicknames_set=int(r["nicknames_set"] or 0),
            game_handled=int(r["game_handled"] or 0),
        ),
        total_score=int(r["total_score"] or 0),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        username=r.get("username"),
    )


class MySQLShiftReportRepository(ShiftReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_report(
        self,
        *,
        user_id: int,
        position: str,
        date_time: datetime,
        activity: ShiftActivity,
        total_score: int,
    ) -> ShiftReport:
        stamp = now_local().replace(microsecond=0)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO logout_records(
                    user_id, position, date_time, attendees_count, dropped_links,
                    recruits, nicknames_set, game_handled, total_score, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    position,
                    date_time,
                    activity.attendees,
                    activity.dropped_links,
                    activity.recruits,
                    activity.nicknames_set,
                    activity.game_handled,
                    int(total_score),
                    stamp,
                    stamp,
                ),
            )
            return ShiftReport(
                logout_id=int(cur.lastrowid),
                user_id=int(user_id),
                position=position,
                date_time=date_time,
                activity=activity,
                total_score=int(total_score),
                created_at=stamp,
                updated_at=stamp,
            )

    def list_reports(self, *, user_id: Optional[int] = None, day: Optional[date] = None) -> Sequence[ShiftReport]:
        clauses: list[str] = []
        params: list[object] = []
        if user_id is not None:
            clauses.append("lr.user_id = %s")
            params.append(int(user_id))
        if day is not None:
            start, end = day_bounds(day)
            clauses.append("lr.date_time >= %s AND lr.date_time < %s")
            params.extend([start, end])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_REPORT_COLUMNS} {where} ORDER BY lr.date_time DESC",
                tuple(params),
            )
            return [_to_report(r) for r in fetchall(cur)]

    def stats(
        self,
        *,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[ShiftStatsRow]:
        clauses: list[str] = []
        params: list[object] = []
        if user_id is not None:
            clauses.append("lr.user_id = %s")
            params.append(int(user_id))
        if start is not None:
            clauses.append("lr.date_time >= %s")
            params.append(day_bounds(start)[0])
        if end is not None:
            # inclusive end date
            clauses.append("lr.date_time < %s")
            params.append(day_bounds(end)[1])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT lr.user_id, u.username,
                       COUNT(lr.logout_id) AS total_entries,
                       COALESCE(SUM(lr.attendees_count), 0) AS total_attendees,
                       COALESCE(SUM(lr.dropped_links), 0) AS total_dropped_links,
                       COALESCE(SUM(lr.recruits), 0) AS total_recruits,
                       COALESCE(SUM(lr.nicknames_set), 0) AS total_nicknames_set,
                       COALESCE(SUM(lr.game_handled), 0) AS total_game_handled,
                       COALESCE(SUM(lr.total_score), 0) AS cumulative_score,
                       COALESCE(AVG(lr.total_score), 0) AS average_score
                FROM logout_records lr
                LEFT JOIN users u ON lr.user_id = u.user_id
                {where}
                GROUP BY lr.user_id, u.username
                ORDER BY cumulative_score DESC
                """,
                tuple(params),
            )
            return [
                ShiftStatsRow(
                    user_id=int(r["user_id"]),
                    username=r.get("username"),
                    total_entries=int(r["total_entries"] or 0),
                    total_attendees=int(r["total_attendees"] or 0),
                    total_dropped_links=int(r["total_dropped_links"] or 0),
                    total_recruits=int(r["total_recruits"] or 0),
                    total_nicknames_set=int(r["total_nicknames_set"] or 0),
                    total_game_handled=int(r["total_game_handled"] or 0),
                    cumulative_score=int(r["cumulative_score"] or 0),
                    average_score=float(r["average_score"] or 0),
                )
                for r in fetchall(cur)
            ]
