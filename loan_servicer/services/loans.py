"""Loan lifecycle - origination with schedule, status changes and aggregate repair"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from loan_servicer.domain.exceptions import NotFoundError
from loan_servicer.domain.installments import generate_schedule
from loan_servicer.domain.ledger import is_paid, should_close
from loan_servicer.domain.models import LoanStatus
from loan_servicer.domain.terms import compute_terms
from loan_servicer.infrastructure.database.models import Installment, Loan
from loan_servicer.infrastructure.database.repositories import (
    BorrowerRepository,
    InstallmentRepository,
    LoanRepository,
)
from loan_servicer.infrastructure.database.session import unit_of_work


@dataclass
class LoanDetails:
    """Loan with its schedule and repayment progress"""

    loan: Loan
    installments: List[Installment]
    total_paid: float
    remaining_amount: float
    paid_installments: int
    remaining_installments: int


class LoanService:
    def __init__(self, db: Session):
        self.db = db
        self.borrowers = BorrowerRepository(db)
        self.loans = LoanRepository(db)
        self.installments = InstallmentRepository(db)

    def get_loan(self, loan_id: uuid.UUID) -> Loan:
        loan = self.loans.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError("Loan", loan_id)
        return loan

    def create_loan(
        self,
        borrower_id: uuid.UUID,
        principal: float,
        interest_rate: float,
        total_installments: int,
        installment_cycle_days: int,
        loan_date: date,
        first_installment_date: date,
        purpose: str = "",
        status: LoanStatus = LoanStatus.ACTIVE,
    ) -> Loan:
        """
        Originate a loan together with its full installment schedule.

        Terms and schedule are computed before anything is written; the loan
        row and every installment row then commit in one transaction, so a
        failure never leaves a loan without its schedule.

        Raises:
            InvalidLoanTermsError: principal, rate, count or cycle out of range
            NotFoundError: borrower does not exist
        """
        terms = compute_terms(principal, interest_rate, total_installments)
        schedule = generate_schedule(
            first_installment_date,
            total_installments,
            installment_cycle_days,
            terms.installment_amount,
        )

        if self.borrowers.get_by_id(borrower_id) is None:
            raise NotFoundError("Borrower", borrower_id)

        with unit_of_work(self.db):
            loan = self.loans.create_loan(
                borrower_id=borrower_id,
                loan_date=loan_date,
                principal=principal,
                interest_rate=interest_rate,
                total_installments=total_installments,
                installment_cycle_days=installment_cycle_days,
                first_installment_date=first_installment_date,
                purpose=purpose or "",
                status=LoanStatus(status).value,
                amount_paid=0.0,
            )
            self.installments.add_schedule(loan.id, schedule)
        return loan

    def get_details(self, loan_id: uuid.UUID) -> LoanDetails:
        loan = self.get_loan(loan_id)
        installments = self.installments.list_by_loan(loan.id)
        total_paid = sum(inst.paid_amount or 0 for inst in installments)
        paid_count = sum(1 for inst in installments if is_paid(inst.status))
        return LoanDetails(
            loan=loan,
            installments=installments,
            total_paid=total_paid,
            remaining_amount=loan.total_repayable - total_paid,
            paid_installments=paid_count,
            remaining_installments=len(installments) - paid_count,
        )

    def list_loans(self) -> List[Loan]:
        return self.loans.list_all()

    def filter_loans(self, status: Optional[LoanStatus] = None, borrower_id: Optional[uuid.UUID] = None) -> List[Loan]:
        return self.loans.filter(status=LoanStatus(status).value if status else None, borrower_id=borrower_id)

    def update_status(self, loan_id: uuid.UUID, status: LoanStatus) -> Loan:
        """Operator status change; automatic closure lives in the payment engine"""
        loan = self.get_loan(loan_id)
        with unit_of_work(self.db):
            loan.status = LoanStatus(status).value
        return loan

    def reconcile(self, loan_id: uuid.UUID) -> Loan:
        """
        Rebuild ``amount_paid`` from installment payments and re-apply closure.

        Repairs loans whose aggregate drifted from their installments, e.g.
        rows written outside the transactional payment path.
        """
        loan = self.get_loan(loan_id)
        installments = self.installments.list_by_loan(loan.id)

        with unit_of_work(self.db):
            loan.amount_paid = sum(inst.paid_amount or 0 for inst in installments if is_paid(inst.status))
            if should_close(loan.status, [inst.status for inst in installments]):
                loan.status = LoanStatus.CLOSED.value
        return loan
