"""Integration tests for the borrower registry"""

import uuid
import pytest
from datetime import date
from sqlalchemy.orm import Session

from loan_servicer.domain.exceptions import (
    BorrowerHasLoansError,
    DomainValidationError,
    DuplicateBorrowerError,
    NotFoundError,
)
from loan_servicer.domain.models import PaymentMode
from loan_servicer.infrastructure.database.models import Borrower
from loan_servicer.services.borrowers import BorrowerService
from loan_servicer.services.payments import PaymentService


def test_create_borrower_defaults(db: Session, borrower: Borrower):
    assert borrower.cibil_score == 650
    assert borrower.is_loyal is False
    assert borrower.notes == ""


def test_create_borrower_duplicate_phone(db: Session, borrower: Borrower):
    with pytest.raises(DuplicateBorrowerError):
        BorrowerService(db).create_borrower("Someone Else", "9876543210", "Elsewhere")


def test_create_borrower_duplicate_phone_caught_by_constraint(db: Session, borrower: Borrower, monkeypatch):
    """Test a phone taken between the lookup and the insert is still a duplicate"""
    service = BorrowerService(db)
    monkeypatch.setattr(service.borrowers, "get_by_phone", lambda phone_number: None)

    with pytest.raises(DuplicateBorrowerError):
        service.create_borrower("Someone Else", "9876543210", "Elsewhere")

    assert db.query(Borrower).count() == 1


def test_update_borrower_partial(db: Session, borrower: Borrower):
    updated = BorrowerService(db).update_borrower(borrower.id, is_loyal=True, notes="Pays in cash")

    assert updated.is_loyal is True
    assert updated.notes == "Pays in cash"
    assert updated.full_name == "Asha Devi"


def test_update_borrower_phone_taken(db: Session, borrower: Borrower):
    service = BorrowerService(db)
    other = service.create_borrower("Ravi Kumar", "9000000001", "Nashik")

    with pytest.raises(DuplicateBorrowerError):
        service.update_borrower(other.id, phone_number="9876543210")


def test_update_borrower_phone_taken_caught_by_constraint(db: Session, borrower: Borrower, monkeypatch):
    service = BorrowerService(db)
    other = service.create_borrower("Ravi Kumar", "9000000001", "Nashik")
    monkeypatch.setattr(service.borrowers, "get_by_phone", lambda phone_number: None)

    with pytest.raises(DuplicateBorrowerError):
        service.update_borrower(other.id, phone_number="9876543210")

    db.expire_all()
    assert db.get(Borrower, other.id).phone_number == "9000000001"


def test_delete_borrower_without_loans(db: Session, borrower: Borrower):
    service = BorrowerService(db)
    service.delete_borrower(borrower.id)

    assert db.get(Borrower, borrower.id) is None


def test_delete_borrower_with_loans_is_rejected(db: Session, borrower: Borrower, make_loan):
    make_loan()

    with pytest.raises(BorrowerHasLoansError):
        BorrowerService(db).delete_borrower(borrower.id)
    assert db.get(Borrower, borrower.id) is not None


def test_delete_unknown_borrower(db: Session):
    with pytest.raises(NotFoundError):
        BorrowerService(db).delete_borrower(uuid.uuid4())


def test_search_by_name_or_phone(db: Session, borrower: Borrower):
    service = BorrowerService(db)
    service.create_borrower("Ravi Kumar", "9000000001", "Nashik")

    assert [b.full_name for b in service.search("asha")] == ["Asha Devi"]
    assert [b.full_name for b in service.search("90000")] == ["Ravi Kumar"]
    with pytest.raises(DomainValidationError):
        service.search("  ")


def test_profile_outstanding_counts_unpaid_on_active_loans(db: Session, borrower: Borrower, make_loan):
    loan = make_loan(principal=3000.0, interest_rate=0.0, total_installments=3)
    PaymentService(db).record_payment(loan.installments[0].id, date(2025, 1, 1), PaymentMode.CASH)

    profile = BorrowerService(db).get_profile(borrower.id)

    assert profile.total_loans == 1
    assert profile.active_loans == 1
    assert len(profile.installments) == 3
    assert profile.total_outstanding == 2000


def test_set_cibil_score(db: Session, borrower: Borrower):
    assert BorrowerService(db).set_cibil_score(borrower.id, 720).cibil_score == 720
