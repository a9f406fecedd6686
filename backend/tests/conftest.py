"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Keep the application's own engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.websockets import WebSocketState

from rest_api.main import create_app
from shared.config.constants import Roles
from shared.infrastructure.db import get_db
from shared.security.auth import sign_user_token
from rest_api.models import Base, User
from rest_api.services.domain.chat_service import chat_rate_limiter


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_chat_rate_limit():
    """The chat limiter is process-wide; start every test with a clean slate."""
    chat_rate_limiter.reset()
    yield
    chat_rate_limiter.reset()


@pytest.fixture(scope="function")
def app():
    """A fresh application, so each test gets its own connection registry."""
    return create_app()


@pytest.fixture(scope="function")
def client(app, db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Users and tokens
# =============================================================================


def _add_user(db_session, email, role, first_name, assigned_counselor_id=None):
    user = User(
        email=email,
        first_name=first_name,
        last_name="Test",
        role=role,
        assigned_counselor_id=assigned_counselor_id,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def counselor(db_session):
    return _add_user(db_session, "counselor@test.com", Roles.COUNSELOR, "Carla")


@pytest.fixture
def student(db_session, counselor):
    """Student assigned to `counselor`."""
    return _add_user(db_session, "student@test.com", Roles.STUDENT, "Sam", counselor.id)


@pytest.fixture
def other_student(db_session):
    """Student with no counselor."""
    return _add_user(db_session, "other@test.com", Roles.STUDENT, "Olga")


@pytest.fixture
def admin(db_session):
    return _add_user(db_session, "admin@test.com", Roles.ADMIN, "Ada")


@pytest.fixture
def make_users(db_session):
    """Factory for N extra students, for report and vote thresholds."""
    def _make(count, prefix="user"):
        return [
            _add_user(db_session, f"{prefix}{i}@test.com", Roles.STUDENT, f"{prefix.title()}{i}")
            for i in range(count)
        ]
    return _make


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user row."""
    def _headers(user):
        return {"Authorization": f"Bearer {sign_user_token(user.id, user.role, user.email)}"}
    return _headers


@pytest.fixture
def ctx_for():
    """JWT-style context dict, as services receive it from current_user."""
    def _ctx(user):
        return {"sub": user.id, "role": user.role, "email": user.email}
    return _ctx


# =============================================================================
# Fake WebSockets
# =============================================================================


@pytest.fixture
def make_socket():
    """
    Factory for fake Starlette WebSockets.

    send_json records payloads; pass fail=True for a socket whose sends
    raise, or closed=True for one already disconnected.
    """
    def _make(fail=False, closed=False):
        ws = MagicMock()
        state = WebSocketState.DISCONNECTED if closed else WebSocketState.CONNECTED
        ws.client_state = state
        ws.application_state = state
        ws.headers = {"origin": "http://localhost:3000"}
        ws.accept = AsyncMock()
        ws.close = AsyncMock()
        ws.receive = AsyncMock()
        ws.send_json = AsyncMock(side_effect=RuntimeError("socket closed") if fail else None)
        return ws
    return _make


def sent_payloads(ws):
    """Every payload passed to ws.send_json, in order."""
    return [call.args[0] for call in ws.send_json.await_args_list]


@pytest.fixture
def payloads():
    return sent_payloads
