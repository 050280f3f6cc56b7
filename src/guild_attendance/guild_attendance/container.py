from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.mysql_attendance_repository import MySQLMemberAttendanceRepository, MySQLStaffAttendanceRepository
from .attendance.repository import MemberAttendanceRepository, StaffAttendanceRepository
from .attendance.service import MemberAttendanceService, StaffAttendanceService
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .mains.mysql_main_repository import MySQLMainRepository
from .mains.repository import MainRepository
from .mains.service import MainService
from .shift_reports.mysql_shift_report_repository import MySQLShiftReportRepository
from .shift_reports.repository import ShiftReportRepository
from .shift_reports.service import ShiftReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.session import InMemorySessionStore, SessionGate, SessionStore


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    mains_repo: MainRepository
    staff_attendance_repo: StaffAttendanceRepository
    member_attendance_repo: MemberAttendanceRepository
    shift_reports_repo: ShiftReportRepository

    auth_service: AuthService
    user_service: UserService
    main_service: MainService
    member_attendance_service: MemberAttendanceService
    staff_attendance_service: StaffAttendanceService
    shift_report_service: ShiftReportService
    session_gate: SessionGate


def _opt(options: Mapping[str, Any], key: str, default: Any) -> Any:
    value = options.get(key)
    return default if value is None else value


def assemble_container(
    *,
    users_repo: UserRepository,
    mains_repo: MainRepository,
    staff_attendance_repo: StaffAttendanceRepository,
    member_attendance_repo: MemberAttendanceRepository,
    shift_reports_repo: ShiftReportRepository,
    options: Optional[Mapping[str, Any]] = None,
    session_store: Optional[SessionStore] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories.

    ``options`` holds the settings values (app.config style keys); missing keys
    fall back to the defaults in ``core.constants``.
    """
    options = options or {}

    auth_service = AuthService(users_repo)
    store = session_store or InMemorySessionStore(
        max_age_seconds=int(_opt(options, "SESSION_MAX_AGE_SECONDS", constants.DEFAULT_SESSION_MAX_AGE_SECONDS)),
    )
    session_gate = SessionGate(
        store,
        auth_service,
        cookie_name=str(_opt(options, "SESSION_COOKIE_NAME", constants.DEFAULT_SESSION_COOKIE_NAME)),
    )

    member_attendance_service = MemberAttendanceService(
        member_attendance_repo,
        mains_repo,
        utc_offset_hours=int(
            _opt(options, "SUBMISSION_UTC_OFFSET_HOURS", constants.DEFAULT_SUBMISSION_UTC_OFFSET_HOURS)
        ),
        window_start_hour=int(
            _opt(options, "SUBMISSION_WINDOW_START_HOUR", constants.DEFAULT_SUBMISSION_WINDOW_START_HOUR)
        ),
        window_end_hour=int(_opt(options, "SUBMISSION_WINDOW_END_HOUR", constants.DEFAULT_SUBMISSION_WINDOW_END_HOUR)),
    )
    shift_report_service = ShiftReportService(
        shift_reports_repo,
        member_attendance_repo,
        max_age_days=int(_opt(options, "SHIFT_REPORT_MAX_AGE_DAYS", constants.DEFAULT_SHIFT_REPORT_MAX_AGE_DAYS)),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        mains_repo=mains_repo,
        staff_attendance_repo=staff_attendance_repo,
        member_attendance_repo=member_attendance_repo,
        shift_reports_repo=shift_reports_repo,
        auth_service=auth_service,
        user_service=UserService(users_repo, mains_repo),
        main_service=MainService(mains_repo),
        member_attendance_service=member_attendance_service,
        staff_attendance_service=StaffAttendanceService(staff_attendance_repo, mains_repo, users_repo),
        shift_report_service=shift_report_service,
        session_gate=session_gate,
    )


def build_container(*, db_config: dict, options: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        mains_repo=MySQLMainRepository(conn),
        staff_attendance_repo=MySQLStaffAttendanceRepository(conn),
        member_attendance_repo=MySQLMemberAttendanceRepository(conn),
        shift_reports_repo=MySQLShiftReportRepository(conn),
        options=options,
        conn=conn,
    )
