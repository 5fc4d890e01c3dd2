"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Callable, Generator, Optional, Tuple
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from invoice_gateway.api.main import create_app
from invoice_gateway.api.dependencies import get_forecast_client
from invoice_gateway.infrastructure.clients.forecast import ForecastClient
from invoice_gateway.infrastructure.database.models import Base, CreditCard, TransactionRecord
from invoice_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def forecast_client() -> AsyncMock:
    """Forecast webhook stand-in; no network in tests"""
    return AsyncMock(spec=ForecastClient)


@pytest.fixture
def app(db: Session, forecast_client: AsyncMock):
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_forecast_client] = lambda: forecast_client
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def make_card(db: Session) -> Callable[..., CreditCard]:
    """Persist a credit card"""

    def _make_card(
        name: str = "Visa Platinum",
        closing_day: int = 3,
        due_day: int = 10,
        current_invoice_cents: int = 0,
        credit_limit_cents: int = 500_000,
    ) -> CreditCard:
        card = CreditCard(
            name=name,
            closing_day=closing_day,
            due_day=due_day,
            credit_limit_cents=credit_limit_cents,
            current_invoice_cents=current_invoice_cents,
        )
        db.add(card)
        db.commit()
        return card

    return _make_card


@pytest.fixture
def make_transaction(db: Session) -> Callable[..., TransactionRecord]:
    """Persist a transaction; invoice is (month, year) or None for an orphan"""

    def _make_transaction(
        card: Optional[CreditCard],
        txn_date: date,
        amount_cents: int = 10_000,
        invoice: Optional[Tuple[int, int]] = None,
        type: str = "EXPENSE",
        is_paid: bool = False,
        description: str = "Purchase",
        current_installment: Optional[int] = None,
        total_installments: Optional[int] = None,
        commit: bool = True,
    ) -> TransactionRecord:
        record = TransactionRecord(
            type=type,
            description=description,
            amount_cents=amount_cents,
            date=txn_date,
            card_id=card.id if card is not None else None,
            invoice_month=invoice[0] if invoice else None,
            invoice_year=invoice[1] if invoice else None,
            is_paid=is_paid,
            current_installment=current_installment,
            total_installments=total_installments,
        )
        db.add(record)
        if commit:
            db.commit()
        return record

    return _make_transaction
