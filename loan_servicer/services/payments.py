"""Payment recording engine - settles installments, scores borrowers and closes loans"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from loan_servicer.domain.exceptions import NotFoundError
from loan_servicer.domain.ledger import ensure_missable, settle, should_close
from loan_servicer.domain.models import InstallmentStatus, LoanStatus, PaymentMode
from loan_servicer.domain.scoring import MISSED_PAYMENT_PENALTY, apply_delta
from loan_servicer.infrastructure.database.models import Borrower, Installment, Loan
from loan_servicer.infrastructure.database.repositories import InstallmentRepository
from loan_servicer.infrastructure.database.session import unit_of_work
from loan_servicer.services.reporting import CollectionEntry, collection_entry


@dataclass
class PaymentRecord:
    """Paid installment as shown in payment history"""

    id: uuid.UUID
    loan_id: uuid.UUID
    borrower_name: str
    amount: float
    payment_date: Optional[date]
    payment_mode: str
    status: str
    notes: str
    is_lender_delay: bool = False


@dataclass
class PaymentReceipt:
    """Result of recording one payment"""

    installment: Installment
    loan_status: str
    borrower_score: int
    score_delta: int
    loan_closed: bool
    payment: PaymentRecord


@dataclass
class MissedResult:
    installment: Installment
    borrower_score: int


@dataclass
class DueToday:
    installments: List[CollectionEntry]
    total_due: float
    count: int


def to_payment_record(installment: Installment, is_lender_delay: bool = False) -> PaymentRecord:
    loan = installment.loan
    borrower = loan.borrower if loan is not None else None
    return PaymentRecord(
        id=installment.id,
        loan_id=installment.loan_id,
        borrower_name=borrower.full_name if borrower is not None else "Unknown",
        amount=installment.paid_amount,
        payment_date=installment.paid_date,
        payment_mode=installment.payment_mode,
        status=installment.status,
        notes=installment.notes or "",
        is_lender_delay=is_lender_delay,
    )


class PaymentService:
    def __init__(self, db: Session):
        self.db = db
        self.installments = InstallmentRepository(db)

    def _resolve(self, installment_id: uuid.UUID) -> tuple[Installment, Loan, Borrower]:
        """Walk installment -> loan -> borrower, failing on any missing link"""
        installment = self.installments.get_by_id(installment_id)
        if installment is None:
            raise NotFoundError("Installment", installment_id)
        loan = installment.loan
        if loan is None:
            raise NotFoundError("Loan", installment.loan_id)
        borrower = loan.borrower
        if borrower is None:
            raise NotFoundError("Borrower", loan.borrower_id)
        return installment, loan, borrower

    def record_payment(
        self,
        installment_id: uuid.UUID,
        payment_date: date,
        payment_mode: PaymentMode,
        is_lender_delay: bool = False,
        notes: Optional[str] = None,
    ) -> PaymentReceipt:
        """
        Record full payment of one installment.

        Flow:
        1. Resolve installment, loan and borrower
        2. Settle the installment (rejects already-paid installments)
        3. Adjust the borrower's CIBIL score by the outcome's delta
        4. Add the installment amount to the loan's amount paid
        5. Re-scan every installment of the loan and close it when all are paid
        6. Commit installment, loan and borrower together

        Raises:
            NotFoundError: installment, loan or borrower missing
            AlreadyPaidError: installment already paid
        """
        installment, loan, borrower = self._resolve(installment_id)
        settlement = settle(installment.status, installment.due_date, payment_date, payment_mode, is_lender_delay)

        loan_closed = False
        with unit_of_work(self.db):
            installment.paid_amount = installment.amount
            installment.paid_date = payment_date
            installment.payment_mode = PaymentMode(payment_mode).value
            installment.status = settlement.status.value
            if notes:
                installment.notes = notes

            borrower.cibil_score = apply_delta(borrower.cibil_score, settlement.score_delta)
            loan.amount_paid = (loan.amount_paid or 0) + installment.amount

            # Closure follows installment statuses, not the amount accumulator
            self.db.flush()
            statuses = [inst.status for inst in self.installments.list_by_loan(loan.id)]
            if should_close(loan.status, statuses):
                loan.status = LoanStatus.CLOSED.value
                loan_closed = True

        return PaymentReceipt(
            installment=installment,
            loan_status=loan.status,
            borrower_score=borrower.cibil_score,
            score_delta=settlement.score_delta,
            loan_closed=loan_closed,
            payment=to_payment_record(installment, is_lender_delay),
        )

    def mark_as_missed(self, installment_id: uuid.UUID, today: date) -> MissedResult:
        """
        Penalise the borrower for a missed unpaid installment.

        The installment keeps its status; only the score changes.

        Raises:
            NotFoundError: installment, loan or borrower missing
            InvalidStateError: installment is paid or not due yet
        """
        installment, _, borrower = self._resolve(installment_id)
        ensure_missable(installment.status, installment.due_date, today)

        with unit_of_work(self.db):
            borrower.cibil_score = apply_delta(borrower.cibil_score, MISSED_PAYMENT_PENALTY)

        return MissedResult(installment=installment, borrower_score=borrower.cibil_score)

    def list_due_today(self, today: date) -> DueToday:
        installments = self.installments.list_unpaid_due_on(today)
        return DueToday(
            installments=[collection_entry(inst, InstallmentStatus.UNPAID, today) for inst in installments],
            total_due=sum(inst.amount for inst in installments),
            count=len(installments),
        )

    def list_payments(self) -> List[PaymentRecord]:
        return [to_payment_record(inst) for inst in self.installments.list_paid()]
