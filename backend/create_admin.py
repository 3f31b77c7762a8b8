"""Create an admin account, or promote an existing one.

Promotion through the API needs an admin token, so the first admin has to be
created here.

Usage:
    python -m backend.create_admin --name ana --email ana@example.com --password '...'
"""
import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from backend.auth import crud
from backend.auth.password_utils import BCRYPT_MAX_PASSWORD_BYTES
from backend.database import SessionLocal, init_schema

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    return parser.parse_args(argv)


def ensure_admin(db, name: str, email: str, password: str) -> str:
    existing = crud.get_user_by_email(db, email)
    if existing is not None:
        crud.set_admin_flag(db, existing.id, True)
        return f"Promoted existing user {existing.name} to admin."

    if crud.get_user_by_name(db, name) is not None:
        raise ValueError(f"Name {name!r} is already taken by another account.")

    user = crud.create_user(db, name=name, email=email, password=password, admin=True)
    return f"Created admin {user.name} (id={user.id})."


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    name = args.name.strip()
    email = args.email.strip()

    if not name or not email or not args.password:
        print("Name, email and password are required.", file=sys.stderr)
        sys.exit(2)
    if len(args.password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        print(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes.", file=sys.stderr)
        sys.exit(2)

    init_schema()
    db = SessionLocal()
    try:
        print(ensure_admin(db, name, email, args.password))
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not create admin account")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
