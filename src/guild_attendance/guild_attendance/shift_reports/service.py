from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..attendance.model import MainAttendanceCount
from ..attendance.repository import MemberAttendanceRepository
from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import as_count, optional_int
from ..core.constants import DEFAULT_SHIFT_REPORT_MAX_AGE_DAYS, MAX_ACTIVITY_COUNT, MAX_POSITION_LENGTH
from ..core.exceptions import ValidationError
from ..core.permissions import attendance_scope, report_owner_filter
from ..users.model import Identity
from .calculator.base import ScoreCalculator
from .calculator.standard_calculator import StandardScoreCalculator
from .model import ShiftActivity, ShiftReport, ShiftStatsRow
from .repository import ShiftReportRepository

logger = logging.getLogger(__name__)


class ShiftReportService:
    """End-of-shift reports and their scoring.

    The attendee count is never taken from the caller: it is the number of public
    attendance submissions on the report's calendar day, limited to the caller's
    assigned mains for handlers.
    """

    def __init__(
        self,
        reports: ShiftReportRepository,
        members: MemberAttendanceRepository,
        *,
        calculator: Optional[ScoreCalculator] = None,
        max_age_days: int = DEFAULT_SHIFT_REPORT_MAX_AGE_DAYS,
    ):
        self._reports = reports
        self._members = members
        self._calculator = calculator or StandardScoreCalculator()
        self.max_age_days = int(max_age_days)

    def _check_date_time(self, value: datetime, now: datetime) -> None:
        if value > now:
            raise ValidationError("Date/time cannot be in the future")
        if value < now - timedelta(days=self.max_age_days):
            raise ValidationError(f"Date/time cannot be more than {self.max_age_days} days in the past")

    def submit(
        self,
        identity: Identity,
        *,
        position: Optional[str],
        date_time: Optional[str],
        dropped_links: Any = None,
        recruits: Any = None,
        nicknames_set: Any = None,
        game_handled: Any = None,
        now: Optional[datetime] = None,
    ) -> ShiftReport:
        position = str(position or "").strip()
        raw_date_time = str(date_time or "").strip()
        if not position or not raw_date_time:
            raise ValidationError("Position and date/time are required")
        if len(position) > MAX_POSITION_LENGTH:
            raise ValidationError(f"Position must be at most {MAX_POSITION_LENGTH} characters")

        when = parse_iso_datetime(raw_date_time)
        self._check_date_time(when, now or now_local())

        attendees = self._members.count_for_day(day=when.date(), handler_user_id=attendance_scope(identity))
        activity = ShiftActivity(
            attendees=attendees,
            dropped_links=as_count(dropped_links, "Dropped links", MAX_ACTIVITY_COUNT),
            recruits=as_count(recruits, "Recruits", MAX_ACTIVITY_COUNT),
            nicknames_set=as_count(nicknames_set, "Nicknames set", MAX_ACTIVITY_COUNT),
            game_handled=as_count(game_handled, "Games handled", MAX_ACTIVITY_COUNT),
        )
        total = self._calculator.total(activity)

        report = self._reports.create_report(
            user_id=identity.user_id,
            position=position,
            date_time=when,
            activity=activity,
            total_score=total,
        )
        logger.info(
            "Shift report %s by %s for %s: attendees=%d total=%d",
            report.logout_id,
            identity.username,
            when.isoformat(),
            attendees,
            total,
        )
        return report

    def list_reports(
        self,
        identity: Identity,
        *,
        day: Optional[date] = None,
        target_user_id: Any = None,
    ) -> list[ShiftReport]:
        owner = report_owner_filter(identity, optional_int(target_user_id, "User ID"))
        return list(self._reports.list_reports(user_id=owner, day=day))

    def attendance_breakdown(self, identity: Identity, *, day: Optional[date]) -> list[MainAttendanceCount]:
        if day is None:
            raise ValidationError("Date is required")
        return list(self._members.breakdown_for_day(day=day, handler_user_id=attendance_scope(identity)))

    def stats(
        self,
        identity: Identity,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        target_user_id: Any = None,
    ) -> list[ShiftStatsRow]:
        if start and end and start > end:
            raise ValidationError("Start date must not be after end date")
        owner = report_owner_filter(identity, optional_int(target_user_id, "User ID"))
        return list(self._reports.stats(user_id=owner, start=start, end=end))
