from __future__ import annotations

from ...core.constants import (
    POINTS_PER_ATTENDEE,
    POINTS_PER_DROPPED_LINK,
    POINTS_PER_GAME_HANDLED,
    POINTS_PER_NICKNAME_SET,
    POINTS_PER_RECRUIT,
)
from ..model import ShiftActivity
from .base import ScoreCalculator


class StandardScoreCalculator(ScoreCalculator):
    """Standard rule: fixed points per activity, summed."""

    def total(self, activity: ShiftActivity) -> int:
        return (
            activity.attendees * POINTS_PER_ATTENDEE
            + activity.dropped_links * POINTS_PER_DROPPED_LINK
            + activity.recruits * POINTS_PER_RECRUIT
            + activity.nicknames_set * POINTS_PER_NICKNAME_SET
            + activity.game_handled * POINTS_PER_GAME_HANDLED
        )
