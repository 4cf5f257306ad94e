"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so no test data persists.
"""

import os

# Must be set before the application modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LEDGER_MODE", "live")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backoffice_ledger.main import app
from backoffice_ledger.models.base import Base, get_db
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.store.factory import get_store
from backoffice_ledger.store.feed import ChangeFeed
from backoffice_ledger.store.sandbox import SandboxLedgerStore
from backoffice_ledger.store.sql import SQLLedgerStore


# Use SQLite for tests, no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

ACTOR = Actor(id="u_alice", display_name="Alice", role="MANAGER")


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    This ensures each test starts with a clean database.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


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
def store(db_session):
    """Live store over the test database, chart already seeded."""
    store = SQLLedgerStore(db_session, ChangeFeed())
    AccountRegistry(store).seed_if_empty()
    return store


@pytest.fixture
def sandbox_store():
    """In-memory sandbox store. Seeds itself on first read."""
    return SandboxLedgerStore()


@pytest.fixture(params=["live", "sandbox"])
def ledger(request, db_session):
    """The same seeded chart on each backend, for parity tests."""
    if request.param == "live":
        store = SQLLedgerStore(db_session, ChangeFeed())
    else:
        store = SandboxLedgerStore()
    AccountRegistry(store).seed_if_empty()
    return store


@pytest.fixture
def actor():
    return ACTOR


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sandbox_client():
    """Test client running against a fresh sandbox store."""
    sandbox = SandboxLedgerStore()
    app.dependency_overrides[get_store] = lambda: sandbox
    yield TestClient(app)
    app.dependency_overrides.clear()
