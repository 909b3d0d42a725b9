from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from taskboard.core.config import jwt_settings
from taskboard.db.repositories.todos import TodoRepository
from taskboard.db.repositories.users import UserRepository
from taskboard.db.session import get_session
from taskboard.features.todos.services import TodoService
from taskboard.main import app
from taskboard.security.password import hash_password
from taskboard.security.tokens import create_access_token

PASSWORD = "password123"
# Un seul hash pour tous les utilisateurs de test (PBKDF2 est volontairement lent)
PASSWORD_HASH = hash_password(PASSWORD)


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user_repo(session):
    return UserRepository(session)


@pytest.fixture
def todo_repo(session):
    return TodoRepository(session)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 15, 12, 0, 0))


@pytest.fixture
def todo_service(todo_repo, user_repo, clock):
    return TodoService(todo_repo=todo_repo, user_repo=user_repo, now_fn=clock)


@pytest.fixture
def make_user(user_repo):
    def _make(username, email=None):
        return user_repo.create(
            username=username,
            email=email or f"{username}@example.com",
            hashed_password=PASSWORD_HASH,
        )
    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(user_id=user.id, username=user.username, settings=jwt_settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers
