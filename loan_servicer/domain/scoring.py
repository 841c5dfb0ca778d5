"""CIBIL score adjustments driven by repayment behaviour"""

from loan_servicer.domain.models import InstallmentStatus

DEFAULT_CIBIL_SCORE = 650

ADVANCE_PAYMENT_BONUS = 2
ON_TIME_PAYMENT_BONUS = 1
LATE_PAYMENT_PENALTY = -1
MISSED_PAYMENT_PENALTY = -2


def score_delta_for(status: InstallmentStatus, is_lender_delay: bool = False) -> int:
    """
    Score change for a settled installment.

    - Advance paid: +2
    - Paid on time: +1, or 0 when the delay was the lender's
    - Paid late:    -1

    The score has no floor or ceiling.
    """
    if status == InstallmentStatus.ADVANCE_PAID:
        return ADVANCE_PAYMENT_BONUS
    if status == InstallmentStatus.PAID_ON_TIME:
        return 0 if is_lender_delay else ON_TIME_PAYMENT_BONUS
    if status == InstallmentStatus.PAID_LATE:
        return LATE_PAYMENT_PENALTY
    raise ValueError(f"No score rule for status {status!r}")


def apply_delta(score: int, delta: int) -> int:
    return score + delta
