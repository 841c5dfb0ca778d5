"""Read-only dashboard and report projections over borrowers, loans and installments"""

import calendar
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from loan_servicer.domain.ledger import is_paid
from loan_servicer.domain.models import InstallmentStatus, LoanStatus
from loan_servicer.infrastructure.database.models import Installment
from loan_servicer.infrastructure.database.repositories import (
    BorrowerRepository,
    InstallmentRepository,
    LoanRepository,
)
from loan_servicer.utils.date_utils import month_bounds, shift_month

MONTH_NAMES = list(calendar.month_name)[1:]


@dataclass
class LoanStats:
    active_loans: int
    closed_loans: int
    total_loans: int


@dataclass
class InstallmentStats:
    today_installments: int
    today_due_amount: float
    overdue_installments: int
    total_installments: int
    paid_installments: int
    advance_paid_installments: int
    unpaid_installments: int
    upcoming_installments: int


@dataclass
class CollectionStats:
    total_recovered: float
    advance_collected: float
    total_collected: float


@dataclass
class DashboardStats:
    total_invested_amount: float
    total_recovered_amount: float
    advance_collected_amount: float
    total_profit: float
    pending_amount: float
    overdue_amount: float
    active_loan_count: int
    total_borrower_count: int
    loan_stats: LoanStats
    installment_stats: InstallmentStats
    collection_stats: CollectionStats


@dataclass
class MonthlyCollections:
    year: int
    months: List[str]
    collections: List[float]
    total_collection: float


@dataclass
class TopBorrower:
    id: uuid.UUID
    full_name: str
    phone_number: str
    cibil_score: int
    is_loyal: bool
    active_loans_count: int
    total_loan_amount: float


@dataclass
class CollectionEntry:
    """Installment to collect, with who owes it"""

    installment_id: uuid.UUID
    installment_number: int
    loan_id: uuid.UUID
    borrower_id: uuid.UUID
    borrower_name: str
    phone_number: str
    address: str
    due_date: date
    amount: float
    status: InstallmentStatus
    days_overdue: int = 0


@dataclass
class LoanSummaryRow:
    status: str
    count: int
    total_amount: float


@dataclass
class CollectionDay:
    paid_on: date
    total_amount: float
    count: int


@dataclass
class ReportSummary:
    total_borrowers: int
    active_loans: int
    completed_loans: int
    total_principal: float
    total_collected: float
    outstanding_amount: float
    total_interest_earned: float
    collection_rate: float
    this_month_collections: float
    last_month_collections: float
    month_over_month_change: Optional[float]


def _amounts(installments: List[Installment]) -> float:
    return sum(inst.amount for inst in installments)


def _paid_amounts(installments: List[Installment]) -> float:
    return sum(inst.paid_amount or 0 for inst in installments)


def collection_entry(installment: Installment, status: InstallmentStatus, today: date) -> CollectionEntry:
    """Flatten an installment with its borrower's contact details"""
    borrower = installment.loan.borrower
    return CollectionEntry(
        installment_id=installment.id,
        installment_number=installment.installment_number,
        loan_id=installment.loan_id,
        borrower_id=borrower.id,
        borrower_name=borrower.full_name,
        phone_number=borrower.phone_number,
        address=borrower.address,
        due_date=installment.due_date,
        amount=installment.amount,
        status=status,
        days_overdue=max((today - installment.due_date).days, 0),
    )


class ReportingService:
    def __init__(self, db: Session):
        self.db = db
        self.borrowers = BorrowerRepository(db)
        self.loans = LoanRepository(db)
        self.installments = InstallmentRepository(db)

    def dashboard_stats(self, today: date) -> DashboardStats:
        """
        Portfolio totals for the dashboard.

        - invested: principal of active loans
        - collected: paid amounts, advance payments reported separately
        - profit: everything collected minus principal of all loans
        - pending: amounts of every unpaid installment
        - overdue: unpaid installments due before today
        """
        active_loans = self.loans.list_by_status(LoanStatus.ACTIVE)
        closed_loans = self.loans.list_by_status(LoanStatus.CLOSED)
        all_installments = self.installments.list_all()

        paid = [
            i for i in all_installments
            if i.status in (InstallmentStatus.PAID_ON_TIME.value, InstallmentStatus.PAID_LATE.value)
        ]
        advance_paid = [i for i in all_installments if i.status == InstallmentStatus.ADVANCE_PAID.value]
        unpaid = [i for i in all_installments if i.status == InstallmentStatus.UNPAID.value]
        upcoming = [i for i in unpaid if i.due_date > today]
        overdue = [i for i in unpaid if i.due_date < today]
        due_today = [i for i in unpaid if i.due_date == today]

        total_recovered = _paid_amounts(paid)
        advance_collected = _paid_amounts(advance_paid)
        total_collected = total_recovered + advance_collected
        total_principal = sum(loan.principal for loan in active_loans + closed_loans)

        return DashboardStats(
            total_invested_amount=sum(loan.principal for loan in active_loans),
            total_recovered_amount=total_collected,
            advance_collected_amount=advance_collected,
            total_profit=total_collected - total_principal,
            pending_amount=_amounts(unpaid),
            overdue_amount=_amounts(overdue),
            active_loan_count=len(active_loans),
            total_borrower_count=self.borrowers.count(),
            loan_stats=LoanStats(
                active_loans=len(active_loans),
                closed_loans=len(closed_loans),
                total_loans=len(active_loans) + len(closed_loans),
            ),
            installment_stats=InstallmentStats(
                today_installments=len(due_today),
                today_due_amount=_amounts(due_today),
                overdue_installments=len(overdue),
                total_installments=len(all_installments),
                paid_installments=len(paid),
                advance_paid_installments=len(advance_paid),
                unpaid_installments=len(unpaid),
                upcoming_installments=len(upcoming),
            ),
            collection_stats=CollectionStats(
                total_recovered=total_recovered,
                advance_collected=advance_collected,
                total_collected=total_collected,
            ),
        )

    def monthly_collections(self, year: int) -> MonthlyCollections:
        """Paid amounts bucketed by the month they were paid in"""
        collections = [0.0] * 12
        paid = self.installments.list_paid(paid_from=date(year, 1, 1), paid_until=date(year, 12, 31))
        for inst in paid:
            collections[inst.paid_date.month - 1] += inst.paid_amount or 0

        return MonthlyCollections(
            year=year,
            months=MONTH_NAMES,
            collections=collections,
            total_collection=sum(collections),
        )

    def top_borrowers(self, limit: int = 10) -> List[TopBorrower]:
        """Borrowers with active loans, ranked by active principal"""
        ranked = []
        for borrower in self.borrowers.list_all():
            active = [loan for loan in borrower.loans if loan.status == LoanStatus.ACTIVE.value]
            if not active:
                continue
            ranked.append(
                TopBorrower(
                    id=borrower.id,
                    full_name=borrower.full_name,
                    phone_number=borrower.phone_number,
                    cibil_score=borrower.cibil_score,
                    is_loyal=borrower.is_loyal,
                    active_loans_count=len(active),
                    total_loan_amount=sum(loan.principal for loan in active),
                )
            )
        ranked.sort(key=lambda b: b.total_loan_amount, reverse=True)
        return ranked[:limit]

    def daily_collection(self, today: date, upcoming_limit: int = 10) -> List[CollectionEntry]:
        """Unpaid installments due today followed by the next upcoming ones"""
        due_today = self.installments.list_unpaid_due_on(today)
        upcoming = self.installments.list_unpaid_due_after(today, limit=upcoming_limit)
        return [collection_entry(i, InstallmentStatus.UNPAID, today) for i in due_today] + [
            collection_entry(i, InstallmentStatus.UPCOMING, today) for i in upcoming
        ]

    def loan_summary(self) -> List[LoanSummaryRow]:
        return [
            LoanSummaryRow(status=status, count=count, total_amount=float(total))
            for status, count, total in self.loans.summary_by_status()
        ]

    def payment_collection(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[CollectionDay]:
        """Collections per payment day; the range applies only when both ends are given"""
        if start_date is None or end_date is None:
            start_date = end_date = None
        return [
            CollectionDay(paid_on=paid_on, total_amount=float(total), count=count)
            for paid_on, total, count in self.installments.collections_by_day(start_date, end_date)
        ]

    def overdue(self, today: date) -> List[CollectionEntry]:
        return [collection_entry(i, InstallmentStatus.UNPAID, today) for i in self.installments.list_overdue(today)]

    def summary(self, today: date) -> ReportSummary:
        """Portfolio summary with this month's collections against last month's"""
        all_loans = self.loans.list_all()
        all_installments = self.installments.list_all()
        paid = [i for i in all_installments if is_paid(i.status)]
        unpaid = [i for i in all_installments if i.status == InstallmentStatus.UNPAID.value]

        total_principal = sum(loan.principal for loan in all_loans)
        total_repayable = sum(loan.total_repayable for loan in all_loans)
        total_collected = _paid_amounts(paid)
        collection_rate = (
            total_collected / total_repayable * 100 if total_collected > 0 and total_repayable > 0 else 0.0
        )

        this_start, next_start = month_bounds(today)
        last_start = shift_month(today, -1)
        this_month = _paid_amounts(
            [i for i in paid if i.paid_date and this_start <= i.paid_date < next_start]
        )
        last_month = _paid_amounts(
            [i for i in paid if i.paid_date and last_start <= i.paid_date < this_start]
        )
        change = (this_month - last_month) / last_month * 100 if last_month > 0 else None

        return ReportSummary(
            total_borrowers=self.borrowers.count(),
            active_loans=sum(1 for loan in all_loans if loan.status == LoanStatus.ACTIVE.value),
            completed_loans=sum(1 for loan in all_loans if loan.status == LoanStatus.CLOSED.value),
            total_principal=total_principal,
            total_collected=total_collected,
            outstanding_amount=_amounts(unpaid),
            total_interest_earned=max(total_collected - total_principal, 0.0),
            collection_rate=collection_rate,
            this_month_collections=this_month,
            last_month_collections=last_month,
            month_over_month_change=change,
        )
