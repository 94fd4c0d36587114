"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from typing import Generator
import uuid
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_gateway.api.main import create_app
from finance_gateway.api.dependencies import get_session_registry
from finance_gateway.domain.billing_settings import InMemoryBillingDayStore, configure_billing_day_store
from finance_gateway.domain.models import Priority, Transaction, TransactionType
from finance_gateway.infrastructure.database.models import Base
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.services.payment_session import PaymentSessionRegistry


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def billing_day_store() -> InMemoryBillingDayStore:
    """Fresh in-memory cutoff day store for every test"""
    store = InMemoryBillingDayStore()
    configure_billing_day_store(store)
    return store


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def registry() -> PaymentSessionRegistry:
    return PaymentSessionRegistry()


@pytest.fixture
def client(db: Session, registry: PaymentSessionRegistry) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_registry] = lambda: registry
    return TestClient(app)


@pytest.fixture
def make_transaction():
    """Factory for domain transactions with sensible defaults"""

    def _make(
        id: str | None = None,
        type: TransactionType = TransactionType.EXPENSE,
        name: str = "Expense",
        value: str = "50.00",
        due_date: date = date(2025, 10, 5),
        paid: bool = False,
        currency: str = "USD",
        priority: Priority = Priority.MEDIUM,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Transaction:
        return Transaction(
            id=id or str(uuid.uuid4()),
            type=type,
            name=name,
            value=Decimal(value),
            currency=currency,
            due_date=due_date,
            priority=priority,
            paid=paid,
            created_at=created_at or datetime(2025, 9, 1),
            updated_at=updated_at or datetime(2025, 9, 1),
        )

    return _make
