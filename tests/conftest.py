"""Shared fixtures.

Tests run against an in-memory SQLite database; every test gets a fresh
schema. The single shared connection (StaticPool) lets the session be used
from the threads FastAPI runs dependencies in.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.rate_limit import limiter
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from tests.utils.factories import create_user_factory

limiter.enabled = False


@pytest.fixture
def memory_engine():
    """Create an in-memory SQLite engine for isolated testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(memory_engine):
    session_factory = sessionmaker(bind=memory_engine, autocommit=False, autoflush=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
async def test_app(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_admin(db_session):
    return create_user_factory(db_session, email="admin@example.com", role="admin")


@pytest.fixture
def test_instructor(db_session):
    return create_user_factory(
        db_session, email="instructor@example.com", full_name="Ivy Instructor", role="instructor"
    )


@pytest.fixture
def test_student(db_session):
    return create_user_factory(db_session, email="student@example.com", role="student")


def auth_cookie(user) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Cookie": f"access_token={token}"}


@pytest.fixture
def admin_headers(test_admin):
    return auth_cookie(test_admin)


@pytest.fixture
def instructor_headers(test_instructor):
    return auth_cookie(test_instructor)


@pytest.fixture
def student_headers(test_student):
    return auth_cookie(test_student)
