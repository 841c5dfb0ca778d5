"""Integration tests for dashboard and report projections"""

import pytest
from datetime import date
from sqlalchemy.orm import Session

from loan_servicer.domain.models import PaymentMode
from loan_servicer.infrastructure.database.models import Borrower, Installment
from loan_servicer.services.borrowers import BorrowerService
from loan_servicer.services.loans import LoanService
from loan_servicer.services.payments import PaymentService
from loan_servicer.services.reporting import ReportingService

TODAY = date(2025, 3, 15)


@pytest.fixture
def portfolio(db: Session, borrower: Borrower, make_loan):
    """
    Two loans for the default borrower plus a closed loan for a second borrower.

    Loan A: 10000 @ 10%, 10 x 1100 monthly from 2025-01-01
        #1 paid on time 2025-01-01, #2 paid late 2025-02-05, #3 advance 2025-02-20
    Loan B: 1000 @ 0%, 2 x 500, due 2025-03-15 and 2025-04-14, unpaid
    Loan C: 2000 @ 5%, 1 x 2100 due 2025-02-01, paid 2025-02-01 -> closed
    """
    loan_a = make_loan()
    loan_b = make_loan(principal=1000.0, interest_rate=0.0, total_installments=2, first_installment_date=TODAY)
    other = BorrowerService(db).create_borrower("Ravi Kumar", "9000000001", "Nashik")
    loan_c = LoanService(db).create_loan(
        borrower_id=other.id,
        principal=2000.0,
        interest_rate=5.0,
        total_installments=1,
        installment_cycle_days=30,
        loan_date=date(2025, 1, 1),
        first_installment_date=date(2025, 2, 1),
    )

    payments = PaymentService(db)
    a = loan_a.installments
    payments.record_payment(a[0].id, date(2025, 1, 1), PaymentMode.CASH)
    payments.record_payment(a[1].id, date(2025, 2, 5), PaymentMode.ONLINE)
    payments.record_payment(a[2].id, date(2025, 2, 20), PaymentMode.ADVANCE)
    payments.record_payment(loan_c.installments[0].id, date(2025, 2, 1), PaymentMode.CASH)
    return loan_a, loan_b, loan_c


def test_dashboard_stats(db: Session, portfolio):
    stats = ReportingService(db).dashboard_stats(TODAY)

    assert stats.total_invested_amount == 11000  # active principal: 10000 + 1000
    assert stats.advance_collected_amount == 1100
    assert stats.total_recovered_amount == pytest.approx(1100 * 3 + 2100)
    assert stats.total_profit == pytest.approx(5400 - 13000)
    assert stats.loan_stats.active_loans == 2
    assert stats.loan_stats.closed_loans == 1
    assert stats.total_borrower_count == 2
    # Loan A #4 (due 2025-04-01) onwards are upcoming; B #1 is due today; nothing overdue
    assert stats.installment_stats.today_installments == 1
    assert stats.installment_stats.today_due_amount == 500
    assert stats.installment_stats.overdue_installments == 0
    assert stats.installment_stats.upcoming_installments == 8
    assert stats.installment_stats.paid_installments == 3
    assert stats.installment_stats.advance_paid_installments == 1


def test_pending_amount_matches_unpaid_installments(db: Session, portfolio):
    """Test pending amount equals the sum of Unpaid installment amounts"""
    unpaid_total = sum(i.amount for i in db.query(Installment).filter(Installment.status == "Unpaid").all())

    stats = ReportingService(db).dashboard_stats(TODAY)

    assert stats.pending_amount == pytest.approx(unpaid_total)
    assert stats.pending_amount == pytest.approx(7 * 1100 + 2 * 500)


def test_overdue_report(db: Session, portfolio):
    later = date(2025, 4, 2)  # A #4 due 2025-04-01 and B #1 due 2025-03-15 are now late
    entries = ReportingService(db).overdue(later)

    assert [(e.installment_number, e.amount) for e in entries] == [(1, 500), (4, 1100)]
    assert entries[0].days_overdue == 18
    assert entries[0].borrower_name == "Asha Devi"


def test_monthly_collections(db: Session, portfolio):
    monthly = ReportingService(db).monthly_collections(2025)

    assert monthly.months[0] == "January"
    assert monthly.collections[0] == 1100
    assert monthly.collections[1] == pytest.approx(1100 + 1100 + 2100)
    assert monthly.total_collection == pytest.approx(5400)
    assert ReportingService(db).monthly_collections(2024).total_collection == 0


def test_top_borrowers_by_active_principal(db: Session, portfolio):
    top = ReportingService(db).top_borrowers()

    # Ravi's only loan is closed
    assert [b.full_name for b in top] == ["Asha Devi"]
    assert top[0].active_loans_count == 2
    assert top[0].total_loan_amount == 11000


def test_daily_collection(db: Session, portfolio):
    entries = ReportingService(db).daily_collection(TODAY, upcoming_limit=3)

    assert entries[0].status == "Unpaid"
    assert entries[0].due_date == TODAY
    assert [e.status for e in entries[1:]] == ["Upcoming"] * 3
    assert [e.due_date for e in entries[1:]] == [date(2025, 4, 1), date(2025, 4, 14), date(2025, 5, 1)]


def test_loan_summary(db: Session, portfolio):
    rows = {row.status: row for row in ReportingService(db).loan_summary()}

    assert rows["Active"].count == 2
    assert rows["Active"].total_amount == 11000
    assert rows["Closed"].count == 1
    assert rows["Closed"].total_amount == 2000


def test_payment_collection_by_day(db: Session, portfolio):
    service = ReportingService(db)
    days = service.payment_collection()

    assert [d.paid_on for d in days] == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 2, 5), date(2025, 2, 20)]
    assert days[1].total_amount == 2100

    ranged = service.payment_collection(date(2025, 2, 1), date(2025, 2, 10))
    assert [d.paid_on for d in ranged] == [date(2025, 2, 1), date(2025, 2, 5)]


def test_report_summary_month_over_month(db: Session, portfolio):
    summary = ReportingService(db).summary(date(2025, 2, 25))

    assert summary.total_borrowers == 2
    assert summary.active_loans == 2
    assert summary.completed_loans == 1
    assert summary.total_principal == 13000
    assert summary.total_collected == pytest.approx(5400)
    assert summary.total_interest_earned == 0  # collected is still below principal
    assert summary.collection_rate == pytest.approx(5400 / (11000 + 1000 + 2100) * 100)
    assert summary.this_month_collections == pytest.approx(4300)
    assert summary.last_month_collections == 1100
    assert summary.month_over_month_change == pytest.approx((4300 - 1100) / 1100 * 100)
