from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.guild_attendance.guild_attendance.attendance.service import MemberAttendanceService
from src.guild_attendance.guild_attendance.core.exceptions import (
    DuplicateSubmissionError,
    NotFoundError,
    SubmissionWindowError,
    ValidationError,
)

GMT8 = timezone(timedelta(hours=8))


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 15, hour, minute, tzinfo=GMT8)


@pytest.fixture
def service(store):
    return MemberAttendanceService(store.members, store.mains)


@pytest.mark.parametrize("hour,minute", [(5, 0), (12, 30), (21, 59)])
def test_submission_inside_window(service, store, hour, minute):
    new_id = service.submit(main_id=1, ip_address="10.0.0.1", now=at(hour, minute))
    assert new_id == 1
    assert store.members.rows[0].member_code is None


@pytest.mark.parametrize("hour,minute", [(4, 59), (22, 0), (23, 30), (0, 0)])
def test_submission_outside_window(service, store, hour, minute):
    with pytest.raises(SubmissionWindowError) as exc:
        service.submit(main_id=1, ip_address="10.0.0.1", now=at(hour, minute))
    assert str(exc.value) == "Attendance submissions are only allowed between 5:00 AM and 10:00 PM GMT+8"
    assert store.members.rows == []


def test_window_uses_fixed_offset_not_server_zone(service):
    # 21:30 UTC is 05:30 next day in GMT+8
    assert service.is_within_window(datetime(2025, 1, 15, 21, 30, tzinfo=timezone.utc))
    assert not service.is_within_window(datetime(2025, 1, 15, 14, 30, tzinfo=timezone.utc))


def test_missing_main_checked_first(service):
    with pytest.raises(ValidationError, match="Main ID is required"):
        service.submit(main_id=None, ip_address="10.0.0.1", now=at(3))
    with pytest.raises(ValidationError):
        service.submit(main_id="abc", ip_address="10.0.0.1", now=at(10))


def test_client_address_must_fit_column(service, store):
    with pytest.raises(ValidationError, match="Invalid client address"):
        service.submit(main_id=1, ip_address="1" * 46, now=at(10))
    assert service.submit(main_id=1, ip_address="f" * 45, now=at(10)) == 1


def test_unknown_main_is_not_found(service):
    with pytest.raises(NotFoundError, match="Main not found"):
        service.submit(main_id=99, ip_address="10.0.0.1", now=at(10))


def test_second_submission_same_day_is_rejected(service, store):
    service.submit(main_id=1, ip_address="10.0.0.1", member_code=" M-7 ", now=at(9))

    with pytest.raises(DuplicateSubmissionError, match="already submitted"):
        service.submit(main_id=1, ip_address="10.0.0.1", now=at(9, 5))

    # other main or other address still accepted
    service.submit(main_id=2, ip_address="10.0.0.1", now=at(9, 10))
    service.submit(main_id=1, ip_address="10.0.0.2", now=at(9, 15))

    assert len(store.members.rows) == 3
    assert store.members.rows[0].member_code == "M-7"


def test_storage_constraint_wins_when_precheck_misses(store):
    class RacyMembers(type(store.members)):
        def find_submission(self, **kwargs):
            return None

    members = RacyMembers(store.users, store.mains)
    service = MemberAttendanceService(members, store.mains)
    service.submit(main_id=1, ip_address="10.0.0.1", now=at(9))

    with pytest.raises(DuplicateSubmissionError):
        service.submit(main_id=1, ip_address="10.0.0.1", now=at(9, 1))
    assert len(members.rows) == 1


def test_stats_scoped_for_handler(service, store, identity_of):
    service.submit(main_id=1, ip_address="10.0.0.1", now=at(9))
    service.submit(main_id=2, ip_address="10.0.0.1", now=at(9))
    service.submit(main_id=2, ip_address="10.0.0.2", now=at(9))

    all_counts = {s.main_id: s.attendance_count for s in service.stats(identity_of(store.owner))}
    assert all_counts == {1: 1, 2: 2}

    handler_counts = {s.main_id: s.attendance_count for s in service.stats(identity_of(store.handler))}
    assert handler_counts == {1: 1}
