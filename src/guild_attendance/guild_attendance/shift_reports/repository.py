from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import ShiftActivity, ShiftReport, ShiftStatsRow


class ShiftReportRepository(Protocol):
    def create_report(
        self,
        *,
        user_id: int,
        position: str,
        date_time: datetime,
        activity: ShiftActivity,
        total_score: int,
    ) -> ShiftReport:
        raise NotImplementedError

    def list_reports(self, *, user_id: Optional[int] = None, day: Optional[date] = None) -> Sequence[ShiftReport]:
        raise NotImplementedError

    def stats(
        self,
        *,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[ShiftStatsRow]:
        """Per-user aggregates; ``end`` is inclusive."""
        raise NotImplementedError
