"""Installment reads and non-lifecycle edits"""

import uuid
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from loan_servicer.domain.exceptions import InvalidStateError, NotFoundError
from loan_servicer.domain.ledger import is_paid
from loan_servicer.domain.models import InstallmentStatus
from loan_servicer.infrastructure.database.models import Installment
from loan_servicer.infrastructure.database.repositories import InstallmentRepository, LoanRepository
from loan_servicer.infrastructure.database.session import unit_of_work


class InstallmentService:
    def __init__(self, db: Session):
        self.db = db
        self.loans = LoanRepository(db)
        self.installments = InstallmentRepository(db)

    def get_installment(self, installment_id: uuid.UUID) -> Installment:
        installment = self.installments.get_by_id(installment_id)
        if installment is None:
            raise NotFoundError("Installment", installment_id)
        return installment

    def list_installments(
        self,
        today: date,
        status: Optional[InstallmentStatus] = None,
        limit: int = 10,
    ) -> List[Installment]:
        """
        List installments by due date, filtered by the status as displayed.

        ``Upcoming`` selects unpaid installments due after today and
        ``Unpaid`` those due today or earlier.
        """
        if status is None:
            return self.installments.list_filtered(limit=limit)

        status = InstallmentStatus(status)
        if status == InstallmentStatus.UPCOMING:
            return self.installments.list_filtered(
                statuses=[InstallmentStatus.UNPAID.value], due_after=today, limit=limit
            )
        if status == InstallmentStatus.UNPAID:
            return self.installments.list_filtered(
                statuses=[InstallmentStatus.UNPAID.value], due_on_or_before=today, limit=limit
            )
        return self.installments.list_filtered(statuses=[status.value], limit=limit)

    def list_by_loan(self, loan_id: uuid.UUID) -> List[Installment]:
        if self.loans.get_by_id(loan_id) is None:
            raise NotFoundError("Loan", loan_id)
        return self.installments.list_by_loan(loan_id)

    def update_installment(
        self,
        installment_id: uuid.UUID,
        notes: Optional[str] = None,
        paid_date: Optional[date] = None,
    ) -> Installment:
        """
        Edit fields outside the payment lifecycle.

        Status, amounts and payment mode only change through payment
        recording; ``paid_date`` can be corrected on paid installments.
        """
        installment = self.get_installment(installment_id)
        if paid_date is not None and not is_paid(installment.status):
            raise InvalidStateError("Paid date can only be corrected on a paid installment")

        with unit_of_work(self.db):
            if notes is not None:
                installment.notes = notes
            if paid_date is not None:
                installment.paid_date = paid_date
        return installment
