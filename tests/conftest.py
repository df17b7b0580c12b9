"""Shared test fixtures for gatehouse."""

import os
import sqlite3
import tempfile

# Point the app at a throwaway database and a cheap bcrypt cost before
# gatehouse.main is imported (it initializes the database at import time).
_fd, _SESSION_DB_PATH = tempfile.mkstemp(suffix=".db")
os.close(_fd)
os.environ.setdefault("DATABASE_PATH", _SESSION_DB_PATH)
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")

import pytest

from gatehouse.auth import challenge, service
from gatehouse.auth.challenge import ChallengeStore
from gatehouse.auth.context import clear_current_identity
from gatehouse.auth.schemas import PrincipalCreate
from gatehouse.config import settings
from gatehouse.db import apply_schema, get_core, init_db
from gatehouse.main import app


@pytest.fixture(autouse=True)
def clean_security_context():
    """Every test starts and ends without an installed identity."""
    clear_current_identity()
    yield
    clear_current_identity()


@pytest.fixture
def test_db():
    """Create in-memory test database with schema."""
    db = sqlite3.connect(":memory:")
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA foreign_keys = ON")
    apply_schema(db)

    yield db

    db.close()


@pytest.fixture
def make_principal(test_db):
    """Factory inserting principals into the in-memory database.

    Returns a callable (username, password="secret", enabled=True) -> PrincipalResponse.
    """
    def _make(username: str, password: str = "secret", enabled: bool = True):
        data = PrincipalCreate(username=username, password=password, enabled=enabled)
        principal = service.create_principal(test_db, data, created_by="tests")
        test_db.commit()
        return principal

    return _make


@pytest.fixture
def challenge_store():
    """A fresh one-shot challenge store with a predictable clock."""
    clock = {"now": 1_000_000.0}
    store = ChallengeStore(ttl_seconds=300, one_shot=True, code_length=4, clock=lambda: clock["now"])
    store.test_clock = clock
    return store


@pytest.fixture
def client(monkeypatch):
    """Create test client for API testing.

    Each test gets a fresh file database and a fresh challenge store.
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    original_db_path = settings.database_path
    settings.database_path = db_path
    monkeypatch.setattr(challenge, "challenges", ChallengeStore(ttl_seconds=300, one_shot=True))

    try:
        init_db()

        app.config['TESTING'] = True
        with app.test_client() as client:
            yield client

    finally:
        settings.database_path = original_db_path
        try:
            os.unlink(db_path)
        except OSError:
            pass


@pytest.fixture
def seeded_client(client):
    """Test client whose database holds admin01, bob and a disabled carol.

    All three share the password "secret".
    """
    with get_core(atomic=True) as core:
        for username, enabled in (("admin01", True), ("bob", True), ("carol", False)):
            service.create_principal(
                core.connection,
                PrincipalCreate(username=username, password="secret", enabled=enabled),
                created_by="tests",
            )
    return client


@pytest.fixture
def login_token(seeded_client):
    """Log in through the API and return a token for the given username."""
    def _login(username: str, password: str = "secret") -> str:
        response = seeded_client.post(
            "/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200
        return response.get_json()["token"]

    return _login
