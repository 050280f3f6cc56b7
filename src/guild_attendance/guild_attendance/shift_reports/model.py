from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ShiftActivity:
    """Counters reported for one shift; attendees are derived server-side."""

    attendees: int = 0
    dropped_links: int = 0
    recruits: int = 0
    nicknames_set: int = 0
    game_handled: int = 0


@dataclass(frozen=True)
class ShiftReport:
    """Domain entity: an end-of-shift ("logout") report."""

    logout_id: int
    user_id: int
    position: str
    date_time: datetime
    activity: ShiftActivity
    total_score: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    username: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "logout_id": self.logout_id,
            "user_id": self.user_id,
            "username": self.username,
            "position": self.position,
            "date_time": _iso(self.date_time),
            "attendees_count": self.activity.attendees,
            "dropped_links": self.activity.dropped_links,
            "recruits": self.activity.recruits,
            "nicknames_set": self.activity.nicknames_set,
            "game_handled": self.activity.game_handled,
            "total_score": self.total_score,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class ShiftStatsRow:
    """Aggregated shift reports of one user."""

    user_id: int
    username: Optional[str]
    total_entries: int
    total_attendees: int
    total_dropped_links: int
    total_recruits: int
    total_nicknames_set: int
    total_game_handled: int
    cumulative_score: int
    average_score: float

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "total_entries": self.total_entries,
            "total_attendees": self.total_attendees,
            "total_dropped_links": self.total_dropped_links,
            "total_recruits": self.total_recruits,
            "total_nicknames_set": self.total_nicknames_set,
            "total_game_handled": self.total_game_handled,
            "cumulative_score": self.cumulative_score,
            "average_score": round(self.average_score, 2),
        }
