from datetime import datetime

from AutoPark.api.DataAccess.AccessUsers import AccessUsers
from AutoPark.api.Models.User import User


def _user(username="unit_user", role="DRIVER"):
    return User(
        id=None,
        username=username,
        name="Unit User",
        email=f"{username}@example.com",
        password="pw",
        created_at=datetime.now().replace(microsecond=0),
        phone="000",
        role=role,
        active=True,
    )


def test_access_users_add_and_get_by_username(conn):
    access = AccessUsers(conn=conn)
    user = _user()

    assert access.add_user(user) is True
    assert user.id is not None

    fetched = access.get_user_byusername("unit_user")
    assert fetched is not None
    assert fetched.id == user.id
    assert fetched.email == "unit_user@example.com"
    assert fetched.created_at == user.created_at
    assert fetched.active is True
    assert access.get_user_byid(user.id).username == "unit_user"


def test_duplicate_username_is_refused(conn):
    access = AccessUsers(conn=conn)
    assert access.add_user(_user()) is True
    assert access.add_user(_user()) is False


def test_update_user(conn):
    access = AccessUsers(conn=conn)
    user = _user()
    access.add_user(user)

    user.name = "Renamed"
    user.active = False
    access.update_user(user)

    fetched = access.get_user_byid(user.id)
    assert fetched.name == "Renamed"
    assert fetched.active is False


def test_has_admin(conn):
    access = AccessUsers(conn=conn)
    access.add_user(_user("driver"))
    assert access.has_admin() is False
    access.add_user(_user("boss", role="ADMIN"))
    assert access.has_admin() is True


def test_missing_user_returns_none(conn):
    access = AccessUsers(conn=conn)
    assert access.get_user_byusername("nobody") is None
    assert access.get_user_byid(999) is None
