import bcrypt

BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHashError(Exception):
    """Hashing or verification failed for a reason other than a mismatch."""


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt embedded in the digest."""
    if not password:
        raise ValueError("Password cannot be empty")

    try:
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    except ValueError as exc:
        raise PasswordHashError("Password could not be hashed") from exc
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored digest.

    A corrupt digest raises PasswordHashError rather than reporting a mismatch.
    """
    if not password:
        return False

    encoded = password.encode("utf-8")
    # Registration never stores such a password, so it can not match.
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        return False

    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except (ValueError, AttributeError) as exc:
        raise PasswordHashError("Stored password hash is invalid") from exc
