from __future__ import annotations

from datetime import datetime

import pytest

from src.guild_attendance.guild_attendance.core.enums import AttendanceStatus
from src.guild_attendance.guild_attendance.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def service(container):
    return container.staff_attendance_service


def test_moderator_records_any_main(service, store, identity_of, fixed_now):
    rec = service.create(identity_of(store.moderator), main_id=3, now=fixed_now)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.created_by_user_id == store.moderator.user_id
    assert rec.date_and_time == fixed_now


def test_handler_only_on_assigned_main(service, store, identity_of):
    handler = identity_of(store.handler)

    service.create(handler, main_id=1, status="late")
    with pytest.raises(AuthorizationError, match="not assigned"):
        service.create(handler, main_id=2)
    assert len(store.staff.records) == 1


def test_create_validation(service, store, identity_of):
    owner = identity_of(store.owner)
    with pytest.raises(ValidationError, match="Main ID is required"):
        service.create(owner, main_id=None)
    with pytest.raises(ValidationError, match="Invalid status"):
        service.create(owner, main_id=1, status="sleeping")
    with pytest.raises(NotFoundError, match="Main not found"):
        service.create(owner, main_id=42)


def test_list_is_scoped_and_filtered(service, store, identity_of):
    owner = identity_of(store.owner)
    service.create(owner, main_id=1, now=datetime(2025, 1, 14, 20, 0))
    service.create(owner, main_id=2, now=datetime(2025, 1, 15, 8, 0))
    service.create(owner, main_id=1, now=datetime(2025, 1, 15, 9, 0))

    everything = service.list(owner)
    assert [r.attendance_id for r in everything] == [3, 2, 1]
    assert everything[0].created_by == "owner"
    assert everything[0].main_name == "Dragon Hunt"

    assert [r.attendance_id for r in service.list(identity_of(store.handler))] == [3, 1]
    assert [r.attendance_id for r in service.list(owner, main_id="1")] == [3, 1]
    assert [r.attendance_id for r in service.list(owner, day=datetime(2025, 1, 15).date())] == [3, 2]
    assert service.list(identity_of(store.idle_handler)) == []


def test_delete_unknown_record_is_not_found(service, store, identity_of):
    with pytest.raises(NotFoundError, match="Attendance record not found"):
        service.delete(identity_of(store.owner), 999)


def test_delete_checks_record_main(service, store, identity_of):
    owner = identity_of(store.owner)
    on_assigned = service.create(owner, main_id=1)
    on_other = service.create(owner, main_id=2)
    handler = identity_of(store.handler)

    with pytest.raises(AuthorizationError):
        service.delete(handler, on_other.attendance_id)
    assert on_other.attendance_id in store.staff.records

    service.delete(handler, on_assigned.attendance_id)
    assert on_assigned.attendance_id not in store.staff.records


def test_new_assignment_applies_without_relogin(service, store, identity_of):
    with pytest.raises(AuthorizationError):
        service.create(identity_of(store.idle_handler), main_id=2)

    store.users.assign_main(store.idle_handler.user_id, 2)
    service.create(identity_of(store.idle_handler), main_id=2)
