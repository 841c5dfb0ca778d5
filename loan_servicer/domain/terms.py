"""Loan terms calculator - flat interest on principal spread over equal installments"""

from loan_servicer.domain.exceptions import InvalidLoanTermsError
from loan_servicer.domain.models import LoanTerms


def compute_terms(principal: float, interest_rate: float, total_installments: int) -> LoanTerms:
    """
    Compute total repayable and per-installment amount.

    total_repayable    = principal + principal * interest_rate / 100
    installment_amount = total_repayable / total_installments

    No rounding is applied; fractional amounts are kept as floats.

    Raises:
        InvalidLoanTermsError: principal <= 0, negative rate, or fewer than one installment
    """
    if principal is None or principal <= 0:
        raise InvalidLoanTermsError("Principal must be greater than zero")
    if interest_rate is None or interest_rate < 0:
        raise InvalidLoanTermsError("Interest rate cannot be negative")
    if (
        isinstance(total_installments, bool)
        or not isinstance(total_installments, int)
        or total_installments < 1
    ):
        raise InvalidLoanTermsError("Total installments must be a whole number of at least 1")

    total_repayable = principal + principal * interest_rate / 100
    return LoanTerms(
        total_repayable=total_repayable,
        installment_amount=total_repayable / total_installments,
    )
