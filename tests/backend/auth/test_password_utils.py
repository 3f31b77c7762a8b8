import pytest

from backend.auth.password_utils import PasswordHashError, hash_password, verify_password


def test_hash_password_salts_every_digest() -> None:
    first = hash_password('p1')
    second = hash_password('p1')

    assert first != second
    assert 'p1' not in first
    assert verify_password('p1', first)
    assert verify_password('p1', second)


def test_verify_password_rejects_wrong_password() -> None:
    digest = hash_password('correct horse')

    assert not verify_password('battery staple', digest)


def test_verify_password_rejects_blank_password() -> None:
    assert not verify_password('', hash_password('p1'))


def test_verify_password_rejects_password_over_bcrypt_limit() -> None:
    digest = hash_password('a' * 72)

    assert not verify_password('a' * 73, digest)


def test_hash_password_rejects_blank_password() -> None:
    with pytest.raises(ValueError):
        hash_password('')


def test_verify_password_raises_for_corrupt_digest() -> None:
    with pytest.raises(PasswordHashError):
        verify_password('p1', 'not-a-bcrypt-digest')
