from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class StaffAttendanceRecord:
    """Domain entity: attendance recorded by staff on a member's behalf."""

    attendance_id: int
    created_by_user_id: int
    main_id: int
    date_and_time: datetime
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "attendanceID": self.attendance_id,
            "createdByUserID": self.created_by_user_id,
            "mainID": self.main_id,
            "dateAndTime": self.date_and_time.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class StaffAttendanceRow:
    """Read-model for listings (joined with creator and main names)."""

    attendance_id: int
    main_id: int
    main_name: Optional[str]
    created_by: Optional[str]
    date_and_time: datetime
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "date_and_time": self.date_and_time.isoformat(),
            "status": self.status.value,
            "created_by": self.created_by,
            "main_name": self.main_name,
            "main_id": self.main_id,
        }


@dataclass(frozen=True)
class MemberAttendance:
    """Domain entity: a public, self-reported attendance."""

    attendance_id: int
    main_id: int
    submitted_at: datetime
    submitted_on: date
    ip_address: str
    member_code: Optional[str] = None


@dataclass(frozen=True)
class MainAttendanceCount:
    main_id: int
    main_name: str
    attendance_count: int

    def to_dict(self) -> dict:
        return {
            "main_id": self.main_id,
            "main_name": self.main_name,
            "attendance_count": self.attendance_count,
        }
