from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise ValidationError("Invalid date (expected YYYY-MM-DD)")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if not value or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_date(value)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive server-local datetime.

    Accepts what a ``datetime-local`` input sends (``2024-05-01T14:30``) as well
    as offset-aware values and a trailing ``Z``.
    """
    raw = (value or "").strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError("Invalid date/time")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_local_naive(moment: datetime) -> datetime:
    """Convert an aware instant to the server's local wall clock (naive)."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def hour_at_offset(moment: datetime, offset_hours: int) -> int:
    """Hour of day of ``moment`` seen from a fixed UTC offset.

    Naive values are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone(timedelta(hours=offset_hours))).hour


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [midnight, next midnight) range for a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
