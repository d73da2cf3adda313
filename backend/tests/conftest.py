"""Shared test fixtures for all test modules."""

import contextlib
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import milkbook.models  # noqa: F401
from milkbook.core import database as db_module
from milkbook.core.auth import create_access_token, hash_password
from milkbook.core.config import settings
from milkbook.core.database import Base, enable_sqlite_foreign_keys, get_db
from milkbook.main import app
from milkbook.models.account import Account

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
event.listen(_test_engine, "connect", enable_sqlite_foreign_keys)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# Well-known default account used across all tests
DEFAULT_ACCOUNT_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
DEFAULT_USERNAME = "dairyfarm"
DEFAULT_PASSWORD = "fresh-milk-123"

# Keep bcrypt cheap in tests
settings.BCRYPT_ROUNDS = 4


def _seed_default_account(session: Session) -> None:
    """Insert the default account used by all tests."""
    account = session.query(Account).filter(Account.id == DEFAULT_ACCOUNT_ID).first()
    if account is None:
        account = Account(
            id=DEFAULT_ACCOUNT_ID,
            username=DEFAULT_USERNAME,
            fullname="Green Meadow Dairy",
            address="12 Farm Lane, Springfield",
            password_hash=hash_password(DEFAULT_PASSWORD),
        )
        session.add(account)
        session.commit()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    session = _TestSessionLocal()
    try:
        _seed_default_account(session)
    finally:
        session.close()

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.commit()
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def default_account_id() -> uuid.UUID:
    return DEFAULT_ACCOUNT_ID


@pytest.fixture
def default_credentials() -> dict[str, str]:
    return {"username": DEFAULT_USERNAME, "password": DEFAULT_PASSWORD}


@pytest.fixture
def make_account(db_session: Session):
    """Factory creating extra tenants."""

    def _make(username: str, password: str = "other-pass-123") -> Account:
        account = Account(
            username=username,
            fullname=f"{username.title()} Dairy",
            address="1 Other Road",
            password_hash=hash_password(password),
        )
        db_session.add(account)
        db_session.commit()
        db_session.refresh(account)
        return account

    return _make


@pytest.fixture
def anon_client() -> TestClient:
    """Test client without credentials."""
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    """Test client authenticated as the default account."""
    test_client = TestClient(app)
    token = create_access_token(DEFAULT_ACCOUNT_ID, DEFAULT_USERNAME)
    test_client.headers["Authorization"] = f"Bearer {token}"
    return test_client
