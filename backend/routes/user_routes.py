import logging

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth import crud
from backend.auth.dependencies import AuthenticatedUser, require_admin
from backend.auth.jwt_handler import TokenCodec, get_token_codec
from backend.auth.password_utils import BCRYPT_MAX_PASSWORD_BYTES, PasswordHashError, verify_password
from backend.core.errors import server_error
from backend.database import get_db
from backend.models.comment import Comment

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'
USER_EXISTS = 'User already exists'
NICKNAME_TAKEN = 'Nickname already taken. Please choose another one.'
USER_NOT_FOUND = 'User not found.'


class RegisterRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    name: str
    email: str
    token: str
    admin: bool


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    admin: bool


class MessageResponse(BaseModel):
    message: str


def require_valid_id(value: str) -> int:
    parsed = crud.parse_id(value)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid ID format.',
        )
    return parsed


def registration_conflict(db: Session, name: str, email: str) -> str:
    """Name the unique field a failed insert collided with."""
    try:
        if crud.get_user_by_email(db, email) is None and crud.get_user_by_name(db, name) is not None:
            return NICKNAME_TAKEN
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Error resolving registration conflict')
    return USER_EXISTS


@router.post('/registracija', response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    name = (data.name or '').strip()
    email = (data.email or '').strip()
    password = data.password or ''

    if not name or not email or not password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='All fields are required',
        )

    if len(password.encode('utf-8')) > BCRYPT_MAX_PASSWORD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes.',
        )

    try:
        if crud.get_user_by_email(db, email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=USER_EXISTS,
            )

        if crud.get_user_by_name(db, name):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=NICKNAME_TAKEN,
            )

        user = crud.create_user(db, name=name, email=email, password=password)
    except IntegrityError as exc:
        # A concurrent registration claimed the name or email first.
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=registration_conflict(db, name, email),
        ) from exc
    except (SQLAlchemyError, PasswordHashError) as exc:
        db.rollback()
        logger.exception('Error registering user')
        raise server_error() from exc

    logger.info('Registered user %s (id=%s)', user.name, user.id)
    return MessageResponse(message='User registered successfully')


@router.post('/login', response_model=LoginResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    if not data.email or not data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)

    try:
        user = crud.get_user_by_email(db, data.email.strip())
        if user is None or not verify_password(data.password, user.hashed_password):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)

        token = codec.issue({'id': user.id, 'name': user.name, 'admin': bool(user.admin)})
    except (SQLAlchemyError, PasswordHashError, jwt.PyJWTError) as exc:
        logger.exception('Login error')
        raise server_error() from exc

    return LoginResponse(name=user.name, email=user.email, token=token, admin=bool(user.admin))


@router.post('/korisnici/{user_id}/promote', response_model=MessageResponse)
def promote_user(
    user_id: str,
    current_user: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target_id = require_valid_id(user_id)

    try:
        updated = crud.set_admin_flag(db, target_id, True)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error promoting user %s', target_id)
        raise server_error() from exc

    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)

    logger.info('%s promoted user %s (id=%s)', current_user.name, updated.name, updated.id)
    return MessageResponse(message=f'{updated.name} promoted to admin.')


@router.post('/korisnici/{user_id}/demote', response_model=MessageResponse)
def demote_user(
    user_id: str,
    current_user: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target_id = require_valid_id(user_id)

    try:
        updated = crud.set_admin_flag(db, target_id, False)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error demoting user %s', target_id)
        raise server_error() from exc

    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)

    logger.info('%s demoted user %s (id=%s)', current_user.name, updated.name, updated.id)
    return MessageResponse(message=f'{updated.name} demoted from admin.')


@router.delete('/korisnici/{user_id}', response_model=MessageResponse)
def delete_user(
    user_id: str,
    current_user: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target_id = require_valid_id(user_id)

    try:
        deleted = crud.delete_user(db, target_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting user %s', target_id)
        raise server_error() from exc

    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)

    logger.info('%s deleted user %s (id=%s)', current_user.name, deleted.name, deleted.id)
    return MessageResponse(message=f'User {deleted.name} has been deleted.')


@router.delete('/{professor_id}/komentari/{comment_id}', response_model=MessageResponse)
def delete_comment(
    professor_id: str,
    comment_id: str,
    current_user: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    require_valid_id(professor_id)
    parsed_comment_id = require_valid_id(comment_id)

    try:
        deleted = db.execute(
            delete(Comment)
            .where(Comment.id == parsed_comment_id)
            .returning(Comment.id)
        ).first()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting comment %s', parsed_comment_id)
        raise server_error() from exc

    # Deleting a missing comment is not an error.
    if deleted is None:
        return MessageResponse(message='Comment not found or already deleted.')

    logger.info('%s deleted comment %s', current_user.name, parsed_comment_id)
    return MessageResponse(message='Comment deleted successfully.')


@router.get('/korisnici', response_model=list[UserResponse])
def list_users(
    current_user: AuthenticatedUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return crud.list_users(db)
    except SQLAlchemyError as exc:
        logger.exception('Error fetching users')
        raise server_error() from exc
