"""Prometheus metrics for monitoring originations, repayment behaviour and request latency"""

from prometheus_client import Counter, Histogram

# Loan metrics
loans_created_counter = Counter(
    "loan_servicer_loans_created_total",
    "Loans originated with a generated schedule",
)

loans_closed_counter = Counter(
    "loan_servicer_loans_closed_total",
    "Loans closed automatically after the last installment was paid",
)

# Payment metrics
payments_counter = Counter(
    "loan_servicer_payments_total",
    "Installment payments recorded",
    ["outcome"],  # Paid on time | Paid late | Advance paid
)

missed_installments_counter = Counter(
    "loan_servicer_missed_installments_total",
    "Installments marked as missed",
)

score_adjustment_counter = Counter(
    "loan_servicer_score_adjustments_total",
    "Credit score adjustments by direction",
    ["direction"],  # up | down | none
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(outcome: str, score_delta: int, loan_closed: bool) -> None:
    """Record payment metrics for monitoring repayment behaviour"""
    payments_counter.labels(outcome=outcome).inc()
    record_score_adjustment(score_delta)
    if loan_closed:
        loans_closed_counter.inc()


def record_score_adjustment(delta: int) -> None:
    if delta > 0:
        direction = "up"
    elif delta < 0:
        direction = "down"
    else:
        direction = "none"
    score_adjustment_counter.labels(direction=direction).inc()
