from sqlalchemy import delete, select, update
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from backend.auth.password_utils import hash_password
from backend.models.user import User

MAX_ID = 2**31 - 1


def parse_id(value: str) -> int | None:
    """Return the integer id encoded in a path segment, or None if malformed."""
    candidate = (value or "").strip()
    if not candidate.isascii() or not candidate.isdigit():
        return None
    parsed = int(candidate)
    if parsed < 1 or parsed > MAX_ID:
        return None
    return parsed


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalars().first()


def get_user_by_name(db: Session, name: str) -> User | None:
    return db.execute(select(User).where(User.name == name)).scalars().first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.id.asc())).scalars())


def create_user(db: Session, *, name: str, email: str, password: str, admin: bool = False) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        admin=admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def set_admin_flag(db: Session, user_id: int, admin: bool) -> Row | None:
    """Update the admin flag and fetch the updated row in one statement.

    Returns None when no user has that id.
    """
    row = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(admin=admin)
        .returning(User.id, User.name, User.email, User.admin)
    ).first()
    db.commit()
    return row


def delete_user(db: Session, user_id: int) -> Row | None:
    row = db.execute(
        delete(User)
        .where(User.id == user_id)
        .returning(User.id, User.name)
    ).first()
    db.commit()
    return row
