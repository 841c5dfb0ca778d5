"""Integration tests for loan origination and lifecycle"""

import uuid
import pytest
from datetime import date
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loan_servicer.domain.exceptions import InvalidLoanTermsError, NotFoundError, PersistenceError
from loan_servicer.domain.models import LoanStatus, PaymentMode
from loan_servicer.infrastructure.database.models import Borrower, Installment, Loan
from loan_servicer.infrastructure.database.repositories import InstallmentRepository
from loan_servicer.services.loans import LoanService
from loan_servicer.services.payments import PaymentService


def test_create_loan_generates_schedule(db: Session, borrower: Borrower, make_loan):
    """Test the worked example: 10000 at 10% over 10 monthly installments"""
    loan = make_loan()

    assert loan.total_repayable == 11000
    assert loan.installment_amount == 1100
    assert loan.status == "Active"
    assert loan.amount_paid == 0

    installments = db.query(Installment).filter(Installment.loan_id == loan.id).order_by(Installment.installment_number).all()
    assert len(installments) == 10
    assert [i.installment_number for i in installments] == list(range(1, 11))
    assert installments[0].due_date == date(2025, 1, 1)
    assert installments[-1].due_date == date(2025, 9, 28)
    assert all(i.amount == 1100 for i in installments)
    assert all(i.status == "Unpaid" for i in installments)


def test_create_loan_unknown_borrower(db: Session):
    with pytest.raises(NotFoundError):
        LoanService(db).create_loan(
            borrower_id=uuid.uuid4(),
            principal=1000.0,
            interest_rate=5.0,
            total_installments=2,
            installment_cycle_days=30,
            loan_date=date(2025, 1, 1),
            first_installment_date=date(2025, 2, 1),
        )
    assert db.query(Loan).count() == 0


def test_create_loan_invalid_terms_writes_nothing(db: Session, borrower: Borrower, make_loan):
    with pytest.raises(InvalidLoanTermsError):
        make_loan(principal=0.0)
    with pytest.raises(InvalidLoanTermsError):
        make_loan(installment_cycle_days=0)
    assert db.query(Loan).count() == 0


def test_create_loan_is_atomic_with_its_schedule(db: Session, borrower: Borrower, make_loan, monkeypatch):
    """Test a failed schedule insert leaves no orphan loan"""

    def failing_add_schedule(self, loan_id, schedule):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(InstallmentRepository, "add_schedule", failing_add_schedule)

    with pytest.raises(PersistenceError):
        make_loan()

    assert db.query(Loan).count() == 0
    assert db.query(Installment).count() == 0


def test_derived_terms_follow_edits(db: Session, borrower: Borrower, make_loan):
    """Test derived amounts track principal edits while installment amounts stay fixed"""
    loan = make_loan()
    loan.principal = 20000.0
    db.commit()

    db.expire_all()
    loan = db.get(Loan, loan.id)
    assert loan.total_repayable == 22000
    assert loan.installment_amount == 2200
    assert all(i.amount == 1100 for i in loan.installments)


def test_get_details_stats(db: Session, borrower: Borrower, make_loan):
    loan = make_loan(total_installments=4, principal=4000.0, interest_rate=0.0)
    first = LoanService(db).get_details(loan.id).installments[0]
    PaymentService(db).record_payment(first.id, date(2025, 1, 1), PaymentMode.CASH)

    details = LoanService(db).get_details(loan.id)
    assert details.total_paid == 1000
    assert details.remaining_amount == 3000
    assert details.paid_installments == 1
    assert details.remaining_installments == 3


def test_update_status_and_filter(db: Session, borrower: Borrower, make_loan):
    service = LoanService(db)
    active = make_loan()
    closed = make_loan(loan_date=date(2024, 11, 1))
    service.update_status(closed.id, LoanStatus.CLOSED)

    assert [l.id for l in service.filter_loans(status=LoanStatus.ACTIVE)] == [active.id]
    assert [l.id for l in service.filter_loans(status=LoanStatus.CLOSED)] == [closed.id]
    assert len(service.filter_loans(borrower_id=borrower.id)) == 2
    assert service.filter_loans(borrower_id=uuid.uuid4()) == []


def test_reconcile_repairs_drifted_aggregate(db: Session, borrower: Borrower, make_loan):
    """Test reconcile rebuilds amount paid and applies closure from statuses"""
    loan = make_loan(total_installments=2, principal=2000.0, interest_rate=0.0)
    for inst in loan.installments:
        inst.status = "Paid late"
        inst.paid_amount = inst.amount
        inst.paid_date = date(2025, 5, 1)
    db.commit()

    repaired = LoanService(db).reconcile(loan.id)

    assert repaired.amount_paid == 2000
    assert repaired.status == "Closed"


def test_get_loan_not_found(db: Session):
    with pytest.raises(NotFoundError):
        LoanService(db).get_loan(uuid.uuid4())
