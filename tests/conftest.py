from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("POLLSTER_DATABASE_URL", "sqlite+pysqlite://")

from pollster.api.deps import get_db_session
from pollster.core.security import Tokener, hash_password
from pollster.main import app
from pollster.models import Base, User

DATABASE_URL = "sqlite+pysqlite://"


engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

PASSWORD = "correct-horse"
# bcrypt is slow; hash once for every fixture user.
_PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db_session: Session) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_db_session] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
def make_user(db_session: Session) -> Callable[[str], User]:
    counter = iter(range(1, 10_000))

    def _make_user(nickname: str) -> User:
        user = User(
            nickname=nickname,
            phone=f"+1555000{next(counter):04d}",
            email=f"{nickname.lower()}@example.com",
            hashed_password=_PASSWORD_HASH,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def alice(make_user: Callable[[str], User]) -> User:
    return make_user("Alice")


@pytest.fixture()
def bob(make_user: Callable[[str], User]) -> User:
    return make_user("Bob")


@pytest.fixture()
def carol(make_user: Callable[[str], User]) -> User:
    return make_user("Carol")


@pytest.fixture()
def tokener() -> Tokener:
    return Tokener.from_settings()


@pytest.fixture()
def headers_for(tokener: Tokener) -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {tokener.issue(user.id)}"}

    return _headers
