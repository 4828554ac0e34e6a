"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped after
it, so no data survives between tests.
"""

import os

# Settings are read at import time: configure before importing the app.
# Four bcrypt rounds is the minimum and keeps pin hashing fast.
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from bank_service.main import app
from bank_service.models.base import Base, build_engine, get_db
from bank_service.schemas.account import AccountCreate
from bank_service.services.account_service import AccountService


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = build_engine(TEST_DATABASE_URL)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """Factory for tests that need one session per thread."""
    return TestSessionLocal


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client():
    """
    Provide a test client with the test database.

    Every request gets its own session, as it would in
    production.
    """
    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def open_account(db_session):
    """Open an account through the service: open_account("alice", "1234")."""
    def _open(name="alice", pin="1234"):
        return AccountService(db_session).create_account(
            AccountCreate(name=name, pin=pin)
        )
    return _open
