import os
import secrets

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')

import bcrypt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.auth import crud  # noqa: E402
from backend.auth.jwt_handler import TokenCodec, get_token_codec  # noqa: E402
from backend.database import Base, get_db  # noqa: E402
from backend.main import app  # noqa: E402
from backend.models.professor import Professor  # noqa: E402


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch: pytest.MonkeyPatch) -> None:
    gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, 'gensalt', lambda rounds=4, prefix=b'2b': gensalt(rounds, prefix))


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(secrets.token_hex(32))


@pytest.fixture
def client(session_factory, codec):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_codec] = lambda: codec
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    def _make_user(name: str, email: str, password: str = 'secret', admin: bool = False) -> int:
        with session_factory() as session:
            user = crud.create_user(session, name=name, email=email, password=password, admin=admin)
            return user.id

    return _make_user


@pytest.fixture
def make_professor(session_factory):
    def _make_professor(name: str = 'Ivo Ivić', **fields) -> int:
        with session_factory() as session:
            professor = Professor(name=name, **fields)
            session.add(professor)
            session.commit()
            return professor.id

    return _make_professor


@pytest.fixture
def auth_header(codec):
    def _auth_header(user_id: int, name: str, admin: bool = False) -> dict:
        token = codec.issue({'id': user_id, 'name': name, 'admin': admin})
        return {'Authorization': f'Bearer {token}'}

    return _auth_header
