"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_servicer.api.dependencies import get_today
from loan_servicer.api.main import create_app
from loan_servicer.infrastructure.database.models import Base, Borrower, Loan
from loan_servicer.infrastructure.database.session import get_db
from loan_servicer.services.borrowers import BorrowerService
from loan_servicer.services.loans import LoanService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed business date so due-date comparisons are deterministic
TODAY = date(2025, 3, 15)


@pytest.fixture
def today() -> date:
    return TODAY


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a fixed business date"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def borrower(db: Session) -> Borrower:
    """Borrower at the default score of 650"""
    return BorrowerService(db).create_borrower(
        full_name="Asha Devi",
        phone_number="9876543210",
        address="12 Market Road, Pune",
    )


@pytest.fixture
def make_loan(db: Session, borrower: Borrower) -> Callable[..., Loan]:
    """Factory for loans owned by the default borrower"""

    def _make_loan(**overrides) -> Loan:
        fields = dict(
            borrower_id=borrower.id,
            principal=10000.0,
            interest_rate=10.0,
            total_installments=10,
            installment_cycle_days=30,
            loan_date=date(2024, 12, 1),
            first_installment_date=date(2025, 1, 1),
        )
        fields.update(overrides)
        return LoanService(db).create_loan(**fields)

    return _make_loan
