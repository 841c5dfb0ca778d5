"""Unit tests for CIBIL score rules"""

import pytest
from loan_servicer.domain.models import InstallmentStatus
from loan_servicer.domain.scoring import (
    DEFAULT_CIBIL_SCORE,
    MISSED_PAYMENT_PENALTY,
    apply_delta,
    score_delta_for,
)


def test_default_score():
    assert DEFAULT_CIBIL_SCORE == 650


def test_score_delta_for_outcomes():
    assert score_delta_for(InstallmentStatus.ADVANCE_PAID) == 2
    assert score_delta_for(InstallmentStatus.PAID_ON_TIME) == 1
    assert score_delta_for(InstallmentStatus.PAID_ON_TIME, is_lender_delay=True) == 0
    assert score_delta_for(InstallmentStatus.PAID_LATE) == -1


def test_score_delta_for_unpaid_is_an_error():
    with pytest.raises(ValueError):
        score_delta_for(InstallmentStatus.UNPAID)


def test_score_is_unbounded():
    """Test no floor or ceiling is applied"""
    assert apply_delta(0, MISSED_PAYMENT_PENALTY) == -2
    assert apply_delta(900, 2) == 902


def test_advance_then_late_sequence():
    """Test 650 -> 652 after an advance payment -> 651 after a late one"""
    score = apply_delta(DEFAULT_CIBIL_SCORE, score_delta_for(InstallmentStatus.ADVANCE_PAID))
    assert score == 652
    score = apply_delta(score, score_delta_for(InstallmentStatus.PAID_LATE))
    assert score == 651
