"""Installment schedule generation for loan repayment"""

from datetime import date, timedelta
from typing import List
from loan_servicer.domain.exceptions import InvalidLoanTermsError
from loan_servicer.domain.models import InstallmentStatus, ScheduledInstallment


def generate_schedule(
    first_installment_date: date,
    total_installments: int,
    cycle_days: int,
    installment_amount: float,
) -> List[ScheduledInstallment]:
    """
    Generate the full installment schedule for a new loan.

    Requirements:
    - Exactly ``total_installments`` entries numbered 1..n
    - Due dates ``cycle_days`` calendar days apart, starting on the first installment date
    - Flat amount on every installment (no remainder adjustment on the last one)
    - Every installment starts ``Unpaid``; ``Upcoming`` is derived at read time

    Example:
        first=2025-01-01, n=10, cycle=30
        #1 due 2025-01-01, #10 due 2025-09-28
    """
    if total_installments < 1:
        raise InvalidLoanTermsError("Total installments must be at least 1")
    if cycle_days < 1:
        raise InvalidLoanTermsError("Installment cycle must be at least 1 day")

    return [
        ScheduledInstallment(
            installment_number=i + 1,
            due_date=first_installment_date + timedelta(days=i * cycle_days),
            amount=installment_amount,
        )
        for i in range(total_installments)
    ]


def display_status(status: str, due_date: date, today: date) -> InstallmentStatus:
    """Relabel unpaid installments that fall due after today as ``Upcoming``"""
    status = InstallmentStatus(status)
    if status == InstallmentStatus.UNPAID and due_date > today:
        return InstallmentStatus.UPCOMING
    return status
