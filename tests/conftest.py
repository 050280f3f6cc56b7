from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.guild_attendance.guild_attendance.attendance.model import (
    MainAttendanceCount,
    MemberAttendance,
    StaffAttendanceRecord,
    StaffAttendanceRow,
)
from src.guild_attendance.guild_attendance.common.datetime_utils import day_bounds
from src.guild_attendance.guild_attendance.container import assemble_container
from src.guild_attendance.guild_attendance.core.enums import AttendanceStatus, Role
from src.guild_attendance.guild_attendance.core.exceptions import DuplicateSubmissionError
from src.guild_attendance.guild_attendance.mains.model import MainEvent
from src.guild_attendance.guild_attendance.shift_reports.model import ShiftActivity, ShiftReport, ShiftStatsRow
from src.guild_attendance.guild_attendance.users.model import AssignedMain, User

PASSWORD = "secret1"


class InMemoryMains:
    def __init__(self, mains: list[MainEvent]):
        self.by_id = {m.main_id: m for m in mains}

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda m: m.name)

    def get_by_id(self, main_id: int) -> Optional[MainEvent]:
        return self.by_id.get(int(main_id))


class InMemoryUsers:
    def __init__(self, mains: InMemoryMains):
        self._mains = mains
        self.by_id: dict[int, User] = {}
        self.assignments: set[tuple[int, int]] = set()
        self._next_id = 1

    def add(self, username: str, role: Role, *, password: str = PASSWORD, email: Optional[str] = None) -> User:
        user = User(
            user_id=self._next_id,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            email=email,
        )
        self.by_id[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.by_id.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.username == username), None)

    def create_user(self, *, username, password_hash, email, role) -> int:
        user = User(user_id=self._next_id, username=username, password_hash=password_hash, role=role, email=email)
        self.by_id[user.user_id] = user
        self._next_id += 1
        return user.user_id

    def update_role(self, user_id: int, role: Role) -> bool:
        user = self.by_id.get(int(user_id))
        if not user:
            return False
        self.by_id[user.user_id] = User(
            user_id=user.user_id,
            username=user.username,
            password_hash=user.password_hash,
            role=role,
            email=user.email,
        )
        return True

    def get_assigned_mains(self, user_id: int):
        mains = [self._mains.get_by_id(mid) for uid, mid in self.assignments if uid == int(user_id)]
        return [AssignedMain(main_id=m.main_id, name=m.name) for m in sorted(mains, key=lambda m: m.name)]

    def is_assigned(self, user_id: int, main_id: int) -> bool:
        return (int(user_id), int(main_id)) in self.assignments

    def assign_main(self, user_id: int, main_id: int) -> bool:
        key = (int(user_id), int(main_id))
        if key in self.assignments:
            return False
        self.assignments.add(key)
        return True

    def list_with_assignments(self):
        return [
            {
                "userID": u.user_id,
                "username": u.username,
                "email": u.email,
                "roleName": u.role.value,
                "assignedMains": [m.to_dict() for m in self.get_assigned_mains(u.user_id)],
            }
            for u in sorted(self.by_id.values(), key=lambda u: u.username)
        ]


class InMemoryStaffAttendance:
    def __init__(self, users: InMemoryUsers, mains: InMemoryMains):
        self._users = users
        self._mains = mains
        self.records: dict[int, StaffAttendanceRecord] = {}
        self._next_id = 1

    def create_record(self, *, created_by_user_id, main_id, status, date_and_time) -> StaffAttendanceRecord:
        rec = StaffAttendanceRecord(
            attendance_id=self._next_id,
            created_by_user_id=int(created_by_user_id),
            main_id=int(main_id),
            date_and_time=date_and_time,
            status=status,
        )
        self.records[rec.attendance_id] = rec
        self._next_id += 1
        return rec

    def get_record(self, attendance_id: int) -> Optional[StaffAttendanceRecord]:
        return self.records.get(int(attendance_id))

    def list_records(self, *, handler_user_id=None, main_id=None, day=None):
        rows = []
        for r in self.records.values():
            if handler_user_id is not None and not self._users.is_assigned(handler_user_id, r.main_id):
                continue
            if main_id is not None and r.main_id != int(main_id):
                continue
            if day is not None:
                start, end = day_bounds(day)
                if not start <= r.date_and_time < end:
                    continue
            creator = self._users.get_by_id(r.created_by_user_id)
            main = self._mains.get_by_id(r.main_id)
            rows.append(
                StaffAttendanceRow(
                    attendance_id=r.attendance_id,
                    main_id=r.main_id,
                    main_name=main.name if main else None,
                    created_by=creator.username if creator else None,
                    date_and_time=r.date_and_time,
                    status=r.status,
                )
            )
        return sorted(rows, key=lambda r: r.date_and_time, reverse=True)

    def delete_record(self, attendance_id: int) -> bool:
        return self.records.pop(int(attendance_id), None) is not None


class InMemoryMemberAttendance:
    """Mirrors the UNIQUE (main_id, ip_address, submitted_on) key of the real table."""

    def __init__(self, users: InMemoryUsers, mains: InMemoryMains):
        self._users = users
        self._mains = mains
        self.rows: list[MemberAttendance] = []

    def _visible(self, handler_user_id, main_id: int) -> bool:
        return handler_user_id is None or self._users.is_assigned(handler_user_id, main_id)

    def find_submission(self, *, main_id, ip_address, day):
        return next(
            (r for r in self.rows if r.main_id == main_id and r.ip_address == ip_address and r.submitted_on == day),
            None,
        )

    def create_submission(self, *, main_id, ip_address, member_code, submitted_at) -> int:
        key = (int(main_id), ip_address, submitted_at.date())
        if any((r.main_id, r.ip_address, r.submitted_on) == key for r in self.rows):
            raise DuplicateSubmissionError("You have already submitted attendance for this main today")
        row = MemberAttendance(
            attendance_id=len(self.rows) + 1,
            main_id=int(main_id),
            submitted_at=submitted_at,
            submitted_on=submitted_at.date(),
            ip_address=ip_address,
            member_code=member_code,
        )
        self.rows.append(row)
        return row.attendance_id

    def _on_day(self, day: Optional[date]):
        if day is None:
            return list(self.rows)
        start, end = day_bounds(day)
        return [r for r in self.rows if start <= r.submitted_at < end]

    def count_for_day(self, *, day, handler_user_id=None) -> int:
        return sum(1 for r in self._on_day(day) if self._visible(handler_user_id, r.main_id))

    def _counts(self, mains, rows):
        return [
            MainAttendanceCount(
                main_id=m.main_id,
                main_name=m.name,
                attendance_count=sum(1 for r in rows if r.main_id == m.main_id),
            )
            for m in mains
        ]

    def stats_by_main(self, *, day=None, handler_user_id=None):
        rows = [r for r in self._on_day(day) if self._visible(handler_user_id, r.main_id)]
        used = {r.main_id for r in rows}
        mains = [m for m in self._mains.list_all() if m.main_id in used]
        return self._counts(mains, rows)

    def breakdown_for_day(self, *, day, handler_user_id=None):
        mains = [m for m in self._mains.list_all() if self._visible(handler_user_id, m.main_id)]
        return self._counts(mains, self._on_day(day))


class InMemoryShiftReports:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.reports: list[ShiftReport] = []

    def create_report(self, *, user_id, position, date_time, activity: ShiftActivity, total_score) -> ShiftReport:
        user = self._users.get_by_id(user_id)
        report = ShiftReport(
            logout_id=len(self.reports) + 1,
            user_id=int(user_id),
            position=position,
            date_time=date_time,
            activity=activity,
            total_score=int(total_score),
            created_at=date_time,
            updated_at=date_time,
            username=user.username if user else None,
        )
        self.reports.append(report)
        return report

    def _filtered(self, user_id, start=None, end=None):
        out = []
        for r in self.reports:
            if user_id is not None and r.user_id != int(user_id):
                continue
            if start is not None and r.date_time < day_bounds(start)[0]:
                continue
            if end is not None and r.date_time >= day_bounds(end)[1]:
                continue
            out.append(r)
        return out

    def list_reports(self, *, user_id=None, day=None):
        rows = self._filtered(user_id, day, day)
        return sorted(rows, key=lambda r: r.date_time, reverse=True)

    def stats(self, *, user_id=None, start=None, end=None):
        grouped: dict[int, list[ShiftReport]] = {}
        for r in self._filtered(user_id, start, end):
            grouped.setdefault(r.user_id, []).append(r)

        rows = []
        for uid, items in grouped.items():
            total = sum(r.total_score for r in items)
            rows.append(
                ShiftStatsRow(
                    user_id=uid,
                    username=items[0].username,
                    total_entries=len(items),
                    total_attendees=sum(r.activity.attendees for r in items),
                    total_dropped_links=sum(r.activity.dropped_links for r in items),
                    total_recruits=sum(r.activity.recruits for r in items),
                    total_nicknames_set=sum(r.activity.nicknames_set for r in items),
                    total_game_handled=sum(r.activity.game_handled for r in items),
                    cumulative_score=total,
                    average_score=total / len(items),
                )
            )
        return sorted(rows, key=lambda r: r.cumulative_score, reverse=True)


@dataclass
class Store:
    mains: InMemoryMains
    users: InMemoryUsers
    staff: InMemoryStaffAttendance
    members: InMemoryMemberAttendance
    reports: InMemoryShiftReports

    owner: User
    elder: User
    moderator: User
    handler: User
    idle_handler: User


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 15, 10, 0, 0)


@pytest.fixture
def store() -> Store:
    mains = InMemoryMains(
        [
            MainEvent(main_id=1, name="Dragon Hunt", description="Weekly dragon hunting expedition"),
            MainEvent(main_id=2, name="Castle Defense", description="Defend the academy castle from invaders"),
            MainEvent(main_id=3, name="Potion Brewing", description="Advanced potion crafting session"),
        ]
    )
    users = InMemoryUsers(mains)
    owner = users.add("owner", Role.OWNER)
    elder = users.add("elder", Role.ELDER)
    moderator = users.add("moderator", Role.MODERATOR)
    handler = users.add("handler", Role.HANDLER)
    idle_handler = users.add("idle", Role.HANDLER)
    users.assign_main(handler.user_id, 1)

    return Store(
        mains=mains,
        users=users,
        staff=InMemoryStaffAttendance(users, mains),
        members=InMemoryMemberAttendance(users, mains),
        reports=InMemoryShiftReports(users),
        owner=owner,
        elder=elder,
        moderator=moderator,
        handler=handler,
        idle_handler=idle_handler,
    )


def _container(store: Store, **options):
    return assemble_container(
        users_repo=store.users,
        mains_repo=store.mains,
        staff_attendance_repo=store.staff,
        member_attendance_repo=store.members,
        shift_reports_repo=store.reports,
        options=options,
    )


@pytest.fixture
def container(store):
    return _container(store)


@pytest.fixture
def identity_of(container):
    def _load(user: User):
        return container.auth_service.load_identity(user.user_id)

    return _load


@pytest.fixture
def make_client(store, monkeypatch):
    """Build a test client; keyword options override settings (e.g. the submission window)."""
    from src.guild_attendance.guild_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")

    def _make(**options):
        app = create_app(container=_container(store, **options))
        app.config["TESTING"] = True
        return app.test_client()

    return _make


@pytest.fixture
def client(make_client):
    # always-open submission window so API tests do not depend on the wall clock
    return make_client(SUBMISSION_WINDOW_START_HOUR=0, SUBMISSION_WINDOW_END_HOUR=24)


@pytest.fixture
def login():
    def _login(client, username: str, password: str = PASSWORD):
        return client.post("/api/auth/login", json={"username": username, "password": password})

    return _login


@pytest.fixture
def recent_local() -> datetime:
    return (datetime.now() - timedelta(hours=1)).replace(second=0, microsecond=0)
