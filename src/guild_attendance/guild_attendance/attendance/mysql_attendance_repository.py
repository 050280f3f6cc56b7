from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import day_bounds
from ..core.constants import DUPLICATE_SUBMISSION_MESSAGE
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateSubmissionError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import MainAttendanceCount, MemberAttendance, StaffAttendanceRecord, StaffAttendanceRow
from .repository import MemberAttendanceRepository, StaffAttendanceRepository

logger = logging.getLogger(__name__)


def _to_counts(rows) -> list[MainAttendanceCount]:
    return [
        MainAttendanceCount(
            main_id=int(r["main_id"]),
            main_name=r["main_name"],
            attendance_count=int(r["attendance_count"] or 0),
        )
        for r in rows
    ]


class MySQLStaffAttendanceRepository(StaffAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_record(
        self,
        *,
        created_by_user_id: int,
        main_id: int,
        status: AttendanceStatus,
        date_and_time: datetime,
    ) -> StaffAttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(created_by_user_id, main_id, date_and_time, status)
                VALUES(%s,%s,%s,%s)
                """,
                (int(created_by_user_id), int(main_id), date_and_time, status.value),
            )
            return StaffAttendanceRecord(
                attendance_id=int(cur.lastrowid),
                created_by_user_id=int(created_by_user_id),
                main_id=int(main_id),
                date_and_time=date_and_time,
                status=status,
            )

    def get_record(self, attendance_id: int) -> Optional[StaffAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, created_by_user_id, main_id, date_and_time, status
                FROM attendance_records
                WHERE attendance_id=%s
                """,
                (int(attendance_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StaffAttendanceRecord(
                attendance_id=int(r["attendance_id"]),
                created_by_user_id=int(r["created_by_user_id"]),
                main_id=int(r["main_id"]),
                date_and_time=r["date_and_time"],
                status=AttendanceStatus(r["status"]),
            )

    def list_records(
        self,
        *,
        handler_user_id: Optional[int] = None,
        main_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Sequence[StaffAttendanceRow]:
        joins = [
            "LEFT JOIN users u ON ar.created_by_user_id = u.user_id",
            "LEFT JOIN mains m ON ar.main_id = m.main_id",
        ]
        clauses: list[str] = []
        params: list[object] = []

        if handler_user_id is not None:
            joins.append("JOIN handler_main_assignments hma ON hma.main_id = ar.main_id AND hma.user_id = %s")
            params.append(int(handler_user_id))
        if main_id is not None:
            clauses.append("ar.main_id = %s")
            params.append(int(main_id))
        if day is not None:
            start, end = day_bounds(day)
            clauses.append("ar.date_and_time >= %s AND ar.date_and_time < %s")
            params.extend([start, end])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.attendance_id, ar.date_and_time, ar.status,
                       u.username AS created_by, m.name AS main_name, ar.main_id
                FROM attendance_records ar
                {' '.join(joins)}
                {where}
                ORDER BY ar.date_and_time DESC
                """,
                tuple(params),
            )
            return [
                StaffAttendanceRow(
                    attendance_id=int(r["attendance_id"]),
                    main_id=int(r["main_id"]),
                    main_name=r.get("main_name"),
                    created_by=r.get("created_by"),
                    date_and_time=r["date_and_time"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def delete_record(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0


class MySQLMemberAttendanceRepository(MemberAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_submission(self, *, main_id: int, ip_address: str, day: date) -> Optional[MemberAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, main_id, submitted_at, submitted_on, ip_address, member_code
                FROM member_attendances
                WHERE main_id=%s AND ip_address=%s AND submitted_on=%s
                LIMIT 1
                """,
                (int(main_id), ip_address, day),
            )
            r = fetchone(cur)
            if not r:
                return None
            return MemberAttendance(
                attendance_id=int(r["id"]),
                main_id=int(r["main_id"]),
                submitted_at=r["submitted_at"],
                submitted_on=r["submitted_on"],
                ip_address=r["ip_address"],
                member_code=r.get("member_code"),
            )

    def create_submission(
        self,
        *,
        main_id: int,
        ip_address: str,
        member_code: Optional[str],
        submitted_at: datetime,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO member_attendances(main_id, submitted_at, submitted_on, ip_address, member_code)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(main_id), submitted_at, submitted_at.date(), ip_address, member_code),
                )
                return int(cur.lastrowid)
        except IntegrityError as err:
            if is_duplicate_key(err):
                logger.info("Duplicate member attendance main=%s ip=%s", main_id, ip_address)
                raise DuplicateSubmissionError(DUPLICATE_SUBMISSION_MESSAGE) from err
            raise

    def count_for_day(self, *, day: date, handler_user_id: Optional[int] = None) -> int:
        start, end = day_bounds(day)
        if handler_user_id is None:
            sql = """
                SELECT COUNT(DISTINCT ma.id) AS total_attendees
                FROM member_attendances ma
                WHERE ma.submitted_at >= %s AND ma.submitted_at < %s
            """
            params: tuple = (start, end)
        else:
            sql = """
                SELECT COUNT(DISTINCT ma.id) AS total_attendees
                FROM member_attendances ma
                JOIN handler_main_assignments hma ON hma.main_id = ma.main_id
                WHERE hma.user_id = %s AND ma.submitted_at >= %s AND ma.submitted_at < %s
            """
            params = (int(handler_user_id), start, end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            row = fetchone(cur)
            return int(row["total_attendees"] or 0) if row else 0

    def stats_by_main(self, *, day: Optional[date] = None, handler_user_id: Optional[int] = None) -> Sequence[MainAttendanceCount]:
        joins = ["JOIN mains m ON ma.main_id = m.main_id"]
        clauses: list[str] = []
        params: list[object] = []

        if handler_user_id is not None:
            joins.append("JOIN handler_main_assignments hma ON hma.main_id = ma.main_id AND hma.user_id = %s")
            params.append(int(handler_user_id))
        if day is not None:
            start, end = day_bounds(day)
            clauses.append("ma.submitted_at >= %s AND ma.submitted_at < %s")
            params.extend([start, end])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT m.main_id, m.name AS main_name, COUNT(ma.id) AS attendance_count
                FROM member_attendances ma
                {' '.join(joins)}
                {where}
                GROUP BY m.main_id, m.name
                ORDER BY m.name
                """,
                tuple(params),
            )
            return _to_counts(fetchall(cur))

    def breakdown_for_day(self, *, day: date, handler_user_id: Optional[int] = None) -> Sequence[MainAttendanceCount]:
        start, end = day_bounds(day)
        params: list[object] = [start, end]
        join_assignment = ""
        if handler_user_id is not None:
            join_assignment = "JOIN handler_main_assignments hma ON hma.main_id = m.main_id AND hma.user_id = %s"
            params.insert(0, int(handler_user_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT m.main_id, m.name AS main_name, COUNT(ma.id) AS attendance_count
                FROM mains m
                {join_assignment}
                LEFT JOIN member_attendances ma ON ma.main_id = m.main_id
                    AND ma.submitted_at >= %s AND ma.submitted_at < %s
                GROUP BY m.main_id, m.name
                ORDER BY m.name
                """,
                tuple(params),
            )
            return _to_counts(fetchall(cur))
