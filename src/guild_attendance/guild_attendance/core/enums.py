from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff roles, ordered from most to least privileged."""

    OWNER = "owner"
    ELDER = "elder"
    MODERATOR = "moderator"
    HANDLER = "handler"


class AttendanceStatus(str, Enum):
    """Status of a staff-recorded attendance row."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
