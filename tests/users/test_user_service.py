from __future__ import annotations

import pytest

from src.guild_attendance.guild_attendance.core.enums import Role
from src.guild_attendance.guild_attendance.core.exceptions import NotFoundError, ValidationError


@pytest.fixture
def service(container):
    return container.user_service


def test_create_account(service, container, store):
    created = service.create_account(username="newbie", password="hunter22", email="", role_name="Handler")

    assert created["roleName"] == "handler"
    assert created["email"] is None
    assert store.users.get_by_username("newbie").role == Role.HANDLER
    assert container.auth_service.authenticate("newbie", "hunter22").username == "newbie"


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"username": "", "password": "hunter22", "role_name": "handler"}, "required"),
        ({"username": "x", "password": "hunter22", "role_name": None}, "required"),
        ({"username": "x", "password": "hunter22", "role_name": "king"}, "Invalid role specified"),
        ({"username": "x", "password": "123", "role_name": "handler"}, "at least 6"),
        ({"username": "x", "password": 1234567, "role_name": "handler"}, "Password must be a string"),
        ({"username": "owner", "password": "hunter22", "role_name": "elder"}, "Username already exists"),
    ],
)
def test_create_account_rejections(service, kwargs, message):
    with pytest.raises(ValidationError, match=message):
        service.create_account(email=None, **kwargs)


def test_promote(service, store):
    service.promote(user_id=str(store.handler.user_id), new_role_name="moderator")
    assert store.users.get_by_id(store.handler.user_id).role == Role.MODERATOR

    with pytest.raises(NotFoundError, match="User not found"):
        service.promote(user_id=404, new_role_name="elder")
    with pytest.raises(ValidationError, match="Invalid role"):
        service.promote(user_id=store.handler.user_id, new_role_name="emperor")
    with pytest.raises(ValidationError, match="User ID and new role are required"):
        service.promote(user_id=None, new_role_name="elder")


def test_assign_main(service, store):
    assert service.assign_main(user_id=store.idle_handler.user_id, main_id=3) is True
    # idempotent
    assert service.assign_main(user_id=store.idle_handler.user_id, main_id=3) is False
    assert store.users.is_assigned(store.idle_handler.user_id, 3)


def test_assign_main_rejections(service, store):
    with pytest.raises(ValidationError, match="Only handlers"):
        service.assign_main(user_id=store.moderator.user_id, main_id=1)
    with pytest.raises(NotFoundError, match="User not found"):
        service.assign_main(user_id=404, main_id=1)
    with pytest.raises(NotFoundError, match="Main not found"):
        service.assign_main(user_id=store.handler.user_id, main_id=404)
    with pytest.raises(ValidationError, match="User ID and Main ID are required"):
        service.assign_main(user_id=store.handler.user_id, main_id=None)


def test_list_users(service):
    users = service.list_users()

    assert [u["username"] for u in users] == ["elder", "handler", "idle", "moderator", "owner"]
    handler = next(u for u in users if u["username"] == "handler")
    assert handler["assignedMains"] == [{"mainID": 1, "name": "Dragon Hunt"}]


def test_list_mains_sorted(container):
    names = [m["name"] for m in container.main_service.list_mains()]
    assert names == ["Castle Defense", "Dragon Hunt", "Potion Brewing"]
