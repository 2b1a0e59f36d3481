"""
Shared test fixtures.
Runs every test against a fresh in-memory SQLite database.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bank_api.database import Base, build_engine, get_db
from bank_api.main import app
from bank_api.models.account import Account

engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session):
    """Insert an account directly, bypassing the service."""
    def _make(account_id, customer_name, balance):
        account = Account(account_id=account_id, customer_name=customer_name, total_balance=Decimal(str(balance)))
        db_session.add(account)
        db_session.commit()
        return account
    return _make
