"""
Pytest configuration and fixtures.
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-sessions")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from meetingapp.database import Base, get_db
from meetingapp.models import Account
from meetingapp.security_utils import create_access_token, hash_password

TEST_PASSWORD = "password123"


# ============================================
# DATABASE FIXTURES
# ============================================

@pytest.fixture(scope="session")
def password_hash():
    """One bcrypt hash shared by all test accounts (hashing is deliberately slow)."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine using in-memory SQLite."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine):
    """Create a test database session."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================
# ACCOUNT FIXTURES
# ============================================

@pytest.fixture
def make_account(db_session, password_hash):
    """Factory creating registered accounts."""

    def _make(username: str, display_name: str = None) -> Account:
        account = Account(
            email=f"{username}@example.com",
            username=username,
            display_name=display_name or username.capitalize(),
            password_hash=password_hash,
        )
        db_session.add(account)
        db_session.commit()
        db_session.refresh(account)
        return account

    return _make


@pytest.fixture
def account(make_account):
    return make_account("xavier", "Xavier")


@pytest.fixture
def other_account(make_account):
    return make_account("yasmine", "Yasmine")


# ============================================
# TEST CLIENT FIXTURES
# ============================================

@pytest.fixture(scope="function")
def test_client(db_session):
    """Create a test client bound to the test session."""
    from meetingapp.main import app

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer headers for an account."""

    def _headers(for_account: Account) -> dict:
        return {"Authorization": f"Bearer {create_access_token(for_account.id)}"}

    return _headers
