import pytest

from backend.auth import crud
from backend.models.user import User


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('1', 1),
        (' 42 ', 42),
        ('0', None),
        ('-3', None),
        ('abc', None),
        ('65f1c0ffee', None),
        ('²', None),
        ('', None),
        (str(2**31), None),
    ],
)
def test_parse_id(value: str, expected: int | None) -> None:
    assert crud.parse_id(value) == expected


def test_create_user_stores_hash_and_defaults_to_regular_user(db) -> None:
    user = crud.create_user(db, name='ana', email='a@x.com', password='p1')

    assert user.admin is False
    assert user.hashed_password != 'p1'
    assert crud.get_user_by_email(db, 'a@x.com').id == user.id
    assert crud.get_user_by_name(db, 'ana').id == user.id


def test_set_admin_flag_returns_updated_row(db) -> None:
    user = crud.create_user(db, name='ana', email='a@x.com', password='p1')

    row = crud.set_admin_flag(db, user.id, True)

    assert row.name == 'ana'
    assert row.admin is True
    db.expire_all()
    assert db.get(User, user.id).admin is True


def test_set_admin_flag_returns_none_for_missing_user(db) -> None:
    assert crud.set_admin_flag(db, 999, True) is None


def test_delete_user_returns_deleted_row(db) -> None:
    user = crud.create_user(db, name='ana', email='a@x.com', password='p1')

    row = crud.delete_user(db, user.id)

    assert row.name == 'ana'
    assert crud.get_user_by_email(db, 'a@x.com') is None
    assert crud.delete_user(db, user.id) is None


def test_list_users_orders_by_id(db) -> None:
    crud.create_user(db, name='ana', email='a@x.com', password='p1')
    crud.create_user(db, name='bob', email='b@x.com', password='p2')

    assert [user.name for user in crud.list_users(db)] == ['ana', 'bob']
