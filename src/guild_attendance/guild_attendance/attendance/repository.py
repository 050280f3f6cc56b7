from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import MainAttendanceCount, MemberAttendance, StaffAttendanceRecord, StaffAttendanceRow


class StaffAttendanceRepository(Protocol):
    def create_record(
        self,
        *,
        created_by_user_id: int,
        main_id: int,
        status: AttendanceStatus,
        date_and_time: datetime,
    ) -> StaffAttendanceRecord:
        raise NotImplementedError

    def get_record(self, attendance_id: int) -> Optional[StaffAttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        handler_user_id: Optional[int] = None,
        main_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Sequence[StaffAttendanceRow]:
        """``handler_user_id`` limits rows to the mains that handler is assigned to."""
        raise NotImplementedError

    def delete_record(self, attendance_id: int) -> bool:
        raise NotImplementedError


class MemberAttendanceRepository(Protocol):
    def find_submission(self, *, main_id: int, ip_address: str, day: date) -> Optional[MemberAttendance]:
        raise NotImplementedError

    def create_submission(
        self,
        *,
        main_id: int,
        ip_address: str,
        member_code: Optional[str],
        submitted_at: datetime,
    ) -> int:
        """Raises ``DuplicateSubmissionError`` when (main, IP, day) already exists."""
        raise NotImplementedError

    def count_for_day(self, *, day: date, handler_user_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def stats_by_main(self, *, day: Optional[date] = None, handler_user_id: Optional[int] = None) -> Sequence[MainAttendanceCount]:
        """Counts per main that has submissions (optionally within one day)."""
        raise NotImplementedError

    def breakdown_for_day(self, *, day: date, handler_user_id: Optional[int] = None) -> Sequence[MainAttendanceCount]:
        """Counts per visible main for one day, listing mains with zero submissions too."""
        raise NotImplementedError
