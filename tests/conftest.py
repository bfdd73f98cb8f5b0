"""
Pytest configuration and fixtures for the DevLog API tests.
"""
import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import re
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.context import get_mailer, get_storage
from app.core.security import create_access_token, get_password_hash
from app.core.storage import R2Storage
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.modules.categories.models.category import Category
from app.modules.user_management.models.user import User

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None

TEST_PASSWORD = "secret123"
TOKEN_PATTERN = re.compile(r"token=([A-Za-z0-9_\-\.]+)")


class RecordingMailer:
    """Stands in for SmtpMailer; keeps every message instead of sending it."""

    def __init__(self):
        self.sent = []

    @property
    def configured(self) -> bool:
        return True

    def send(self, to: str, subject: str, html: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True

    def last_token(self) -> str:
        match = TOKEN_PATTERN.search(self.sent[-1]["html"])
        assert match, "no token link in the last message"
        return match.group(1)


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def mailer(db):
    """Recording mailer wired into the app."""
    recording = RecordingMailer()
    app.dependency_overrides[get_mailer] = lambda: recording
    return recording


@pytest.fixture(scope="function")
def storage(db, tmp_path):
    """Local-disk storage rooted in a temporary directory."""
    local = R2Storage()
    local.client = None
    local.upload_dir = str(tmp_path)
    app.dependency_overrides[get_storage] = lambda: local
    return local


@pytest.fixture(scope="function")
def client(db, mailer):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def make_user(db):
    """Factory for users with the shared test password."""

    def _make_user(username: str, role: str = "user", **fields) -> User:
        user = User(
            id=str(uuid.uuid4()),
            email=fields.pop("email", f"{username}@example.com"),
            username=username,
            nickname=fields.pop("nickname", f"{username.capitalize()}Nick"),
            hashed_password=get_password_hash(TEST_PASSWORD),
            auth_provider=fields.pop("auth_provider", "email"),
            role=role,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def test_user(make_user):
    return make_user("alice")


@pytest.fixture(scope="function")
def other_user(make_user):
    return make_user("bob")


@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user("root", role="admin")


def headers_for(user: User) -> dict:
    """Bearer auth headers for a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Get auth headers for the test user."""
    return headers_for(test_user)


@pytest.fixture(scope="function")
def other_headers(other_user):
    return headers_for(other_user)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture(scope="function")
def category(db):
    cat = Category(id=str(uuid.uuid4()), name="Python", slug="python", sort_order=1)
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture(scope="function")
def create_post(client):
    """Create a post through the API and return its JSON."""

    def _create_post(headers: dict, **fields) -> dict:
        payload = {"title": "Hello World", "content": "Some content", "status": "published"}
        payload.update(fields)
        response = client.post("/api/v1/posts", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_post


@pytest.fixture(scope="function")
def headers():
    """Build bearer headers for any user: headers(user)."""
    return headers_for
