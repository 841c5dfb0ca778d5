"""Installment state machine - payment settlement and loan closure rules"""

from datetime import date
from typing import Iterable
from loan_servicer.domain.exceptions import AlreadyPaidError, DomainValidationError, InvalidStateError
from loan_servicer.domain.installments import display_status
from loan_servicer.domain.models import (
    PAID_STATUSES,
    InstallmentStatus,
    LoanStatus,
    PaymentMode,
    Settlement,
)
from loan_servicer.domain.scoring import score_delta_for


def is_paid(status: str) -> bool:
    return InstallmentStatus(status) in PAID_STATUSES


def resolve_paid_status(
    due_date: date,
    payment_date: date,
    payment_mode: PaymentMode,
    is_lender_delay: bool = False,
) -> InstallmentStatus:
    """
    Decide which terminal paid state a payment lands in.

    Precedence:
    1. ``advance`` mode -> Advance paid, whatever the dates
    2. lender delay     -> Paid on time (lateness is not the borrower's)
    3. paid on or before the due date -> Paid on time
    4. otherwise        -> Paid late
    """
    if payment_mode == PaymentMode.ADVANCE:
        return InstallmentStatus.ADVANCE_PAID
    if is_lender_delay:
        return InstallmentStatus.PAID_ON_TIME
    if payment_date <= due_date:
        return InstallmentStatus.PAID_ON_TIME
    return InstallmentStatus.PAID_LATE


def settle(
    current_status: str,
    due_date: date,
    payment_date: date,
    payment_mode: PaymentMode,
    is_lender_delay: bool = False,
) -> Settlement:
    """
    Apply a payment to an installment in ``current_status``.

    Raises:
        AlreadyPaidError: installment already reached a paid state
        DomainValidationError: payment mode ``none``
    """
    if is_paid(current_status):
        raise AlreadyPaidError("Installment has already been paid")
    if PaymentMode(payment_mode) == PaymentMode.NONE:
        raise DomainValidationError('Payment mode must be "cash", "online", or "advance"')

    status = resolve_paid_status(due_date, payment_date, PaymentMode(payment_mode), is_lender_delay)
    return Settlement(status=status, score_delta=score_delta_for(status, is_lender_delay))


def ensure_missable(current_status: str, due_date: date, today: date) -> None:
    """Only installments that are unpaid and already due can be marked as missed"""
    status = display_status(current_status, due_date, today)
    if status == InstallmentStatus.UPCOMING:
        raise InvalidStateError("Installment is not due yet and cannot be marked as missed")
    if status != InstallmentStatus.UNPAID:
        raise InvalidStateError("Only unpaid installments can be marked as missed")


def all_paid(statuses: Iterable[str]) -> bool:
    statuses = list(statuses)
    return bool(statuses) and all(is_paid(s) for s in statuses)


def should_close(loan_status: str, statuses: Iterable[str]) -> bool:
    """Loan closes once every installment is paid; closed loans never reopen here"""
    return LoanStatus(loan_status) == LoanStatus.ACTIVE and all_paid(statuses)
