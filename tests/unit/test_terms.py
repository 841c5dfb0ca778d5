"""Unit tests for the loan terms calculator"""

import pytest
from loan_servicer.domain.exceptions import InvalidLoanTermsError
from loan_servicer.domain.terms import compute_terms


def test_compute_terms_flat_interest():
    """Test 10% flat interest on 10000 over 10 installments"""
    terms = compute_terms(10000, 10, 10)

    assert terms.total_repayable == 11000
    assert terms.installment_amount == 1100


def test_compute_terms_zero_interest():
    terms = compute_terms(5000, 0, 4)

    assert terms.total_repayable == 5000
    assert terms.installment_amount == 1250


@pytest.mark.parametrize(
    "principal,rate,count",
    [(1000, 12.5, 3), (777.77, 18, 7), (250000, 24, 52), (1, 0.5, 1)],
)
def test_compute_terms_installments_sum_to_total(principal, rate, count):
    """Test installments add back up to the total repayable (no rounding applied)"""
    terms = compute_terms(principal, rate, count)

    assert terms.total_repayable == pytest.approx(principal + principal * rate / 100)
    assert terms.installment_amount * count == pytest.approx(terms.total_repayable)


def test_compute_terms_keeps_fractional_amounts():
    terms = compute_terms(1000, 0, 3)
    assert terms.installment_amount == pytest.approx(333.3333333)


@pytest.mark.parametrize(
    "principal,rate,count",
    [(0, 10, 10), (-500, 10, 10), (1000, -1, 10), (1000, 10, 0), (1000, 10, 2.5)],
)
def test_compute_terms_rejects_invalid_terms(principal, rate, count):
    with pytest.raises(InvalidLoanTermsError):
        compute_terms(principal, rate, count)
