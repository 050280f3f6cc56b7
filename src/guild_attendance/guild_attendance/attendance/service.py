from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

from ..common.datetime_utils import hour_at_offset, now_local, now_utc, to_local_naive
from ..common.validators import optional_int, require_int
from ..core.constants import (
    DEFAULT_SUBMISSION_UTC_OFFSET_HOURS,
    DEFAULT_SUBMISSION_WINDOW_END_HOUR,
    DEFAULT_SUBMISSION_WINDOW_START_HOUR,
    DUPLICATE_SUBMISSION_MESSAGE,
    MAX_IP_ADDRESS_LENGTH,
    MAX_MEMBER_CODE_LENGTH,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    DuplicateSubmissionError,
    NotFoundError,
    SubmissionWindowError,
    ValidationError,
)
from ..core.permissions import attendance_scope, ensure_can_record
from ..mains.repository import MainRepository
from ..users.model import Identity
from ..users.repository import UserRepository
from .model import MainAttendanceCount, StaffAttendanceRecord, StaffAttendanceRow
from .repository import MemberAttendanceRepository, StaffAttendanceRepository

logger = logging.getLogger(__name__)


def _required_main_id(value: Any) -> int:
    if value in (None, "", 0, "0"):
        raise ValidationError("Main ID is required")
    return require_int(value, "Main ID")


def parse_status(value: Optional[str]) -> AttendanceStatus:
    raw = str(value or AttendanceStatus.PRESENT.value).strip().lower()
    try:
        return AttendanceStatus(raw)
    except ValueError:
        raise ValidationError("Invalid status (expected present, absent or late)")


class MemberAttendanceService:
    """Public self-reported attendance.

    Submissions are accepted only inside a daily window read at a fixed UTC
    offset, and at most once per (main, IP, server-local calendar day).
    """

    def __init__(
        self,
        members: MemberAttendanceRepository,
        mains: MainRepository,
        *,
        utc_offset_hours: int = DEFAULT_SUBMISSION_UTC_OFFSET_HOURS,
        window_start_hour: int = DEFAULT_SUBMISSION_WINDOW_START_HOUR,
        window_end_hour: int = DEFAULT_SUBMISSION_WINDOW_END_HOUR,
    ):
        self._members = members
        self._mains = mains
        self._offset = int(utc_offset_hours)
        self._start_hour = int(window_start_hour)
        self._end_hour = int(window_end_hour)

    def window_message(self) -> str:
        def _fmt(h: int) -> str:
            suffix = "AM" if h % 24 < 12 else "PM"
            return f"{(h % 12) or 12}:00 {suffix}"

        sign = "+" if self._offset >= 0 else "-"
        return (
            f"Attendance submissions are only allowed between {_fmt(self._start_hour)} "
            f"and {_fmt(self._end_hour)} GMT{sign}{abs(self._offset)}"
        )

    def is_within_window(self, moment: datetime) -> bool:
        hour = hour_at_offset(moment, self._offset)
        return self._start_hour <= hour < self._end_hour

    def submit(
        self,
        *,
        main_id: Any,
        ip_address: str,
        member_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        mid = _required_main_id(main_id)

        now = now or now_utc()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        if not self.is_within_window(now):
            raise SubmissionWindowError(self.window_message())

        if not self._mains.get_by_id(mid):
            raise NotFoundError("Main not found")

        if not ip_address or len(ip_address) > MAX_IP_ADDRESS_LENGTH:
            raise ValidationError("Invalid client address")

        submitted_at = to_local_naive(now)
        if self._members.find_submission(main_id=mid, ip_address=ip_address, day=submitted_at.date()):
            raise DuplicateSubmissionError(DUPLICATE_SUBMISSION_MESSAGE)

        code = str(member_code or "").strip() or None
        if code and len(code) > MAX_MEMBER_CODE_LENGTH:
            raise ValidationError(f"Member code must be at most {MAX_MEMBER_CODE_LENGTH} characters")

        new_id = self._members.create_submission(
            main_id=mid,
            ip_address=ip_address,
            member_code=code,
            submitted_at=submitted_at,
        )
        logger.info("Member attendance %s recorded for main %s from %s", new_id, mid, ip_address)
        return new_id

    def stats(self, identity: Identity, *, day: Optional[date] = None) -> list[MainAttendanceCount]:
        return list(self._members.stats_by_main(day=day, handler_user_id=attendance_scope(identity)))


class StaffAttendanceService:
    """Attendance recorded by staff; handlers only act on their assigned mains."""

    def __init__(
        self,
        records: StaffAttendanceRepository,
        mains: MainRepository,
        users: UserRepository,
    ):
        self._records = records
        self._mains = mains
        self._users = users

    def create(
        self,
        identity: Identity,
        *,
        main_id: Any,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> StaffAttendanceRecord:
        mid = _required_main_id(main_id)
        st = parse_status(status)

        if not self._mains.get_by_id(mid):
            raise NotFoundError("Main not found")

        ensure_can_record(identity, mid, self._users.is_assigned)

        record = self._records.create_record(
            created_by_user_id=identity.user_id,
            main_id=mid,
            status=st,
            date_and_time=now or now_local(),
        )
        logger.info("%s recorded %s for main %s (id=%s)", identity.username, st.value, mid, record.attendance_id)
        return record

    def list(
        self,
        identity: Identity,
        *,
        main_id: Any = None,
        day: Optional[date] = None,
    ) -> list[StaffAttendanceRow]:
        return list(
            self._records.list_records(
                handler_user_id=attendance_scope(identity),
                main_id=optional_int(main_id, "Main ID"),
                day=day,
            )
        )

    def delete(self, identity: Identity, record_id: Any) -> None:
        rid = require_int(record_id, "Attendance ID")

        record = self._records.get_record(rid)
        if not record:
            raise NotFoundError("Attendance record not found")

        ensure_can_record(identity, record.main_id, self._users.is_assigned)

        if not self._records.delete_record(rid):
            raise NotFoundError("Attendance record not found")
        logger.info("%s deleted attendance record %s (main %s)", identity.username, rid, record.main_id)
