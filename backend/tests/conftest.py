"""Shared test fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import datetime
from decimal import Decimal
import uuid

from app.database import Base
from app.dependencies import get_db, get_registry, get_clock
from app.main import app
from app.models.expense import Expense
from app.schemas.expense import ExpenseRecord
from app.services.suggestion_registry import SuggestionRegistry


FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0)


def make_expense(
    title="Netflix",
    amount="93.00",
    category="Entertainment",
    timestamp=None,
    is_recurring=False,
    id=None,
):
    """Build a detector record with sensible defaults."""
    return ExpenseRecord(
        id=id or str(uuid.uuid4()),
        amount=Decimal(str(amount)),
        title=title,
        category=category,
        timestamp=timestamp or FIXED_NOW,
        is_recurring=is_recurring,
    )


@pytest.fixture
def expense_factory():
    return make_expense


@pytest.fixture
def registry():
    """A registry with a fixed clock."""
    return SuggestionRegistry(clock=lambda: FIXED_NOW)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session, registry):
    """Create a test client with database, registry and clock overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_expense(db_session):
    """Create a stored expense."""
    expense = Expense(
        id=str(uuid.uuid4()),
        amount=Decimal("93.00"),
        title="Netflix",
        category="Entertainment",
        timestamp=datetime(2024, 1, 15, 9, 0, 0),
        is_recurring=False,
        source="manual",
    )
    db_session.add(expense)
    db_session.commit()
    db_session.refresh(expense)
    return expense
