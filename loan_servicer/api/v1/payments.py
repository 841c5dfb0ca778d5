"""/v1/payments - payment recording, due lists and missed installments"""

import uuid
from datetime import date
from typing import List
from fastapi import APIRouter, Depends

from loan_servicer.api.dependencies import get_payment_service, get_request_id, get_today
from loan_servicer.api.v1.schemas import (
    CollectionEntrySchema,
    DueTodayResponse,
    InstallmentSchema,
    MissedResponse,
    PaymentRecordSchema,
    PaymentRequest,
    PaymentResponse,
)
from loan_servicer.domain.scoring import MISSED_PAYMENT_PENALTY
from loan_servicer.infrastructure.observability.logging import log_payment
from loan_servicer.infrastructure.observability.metrics import (
    missed_installments_counter,
    record_payment,
    record_score_adjustment,
)
from loan_servicer.services.payments import PaymentReceipt, PaymentService

router = APIRouter()


def payment_response(receipt: PaymentReceipt, request_id: str, today: date) -> PaymentResponse:
    """Record metrics and logs for a committed payment and build its response"""
    installment = receipt.installment
    record_payment(installment.status, receipt.score_delta, receipt.loan_closed)
    log_payment(
        request_id,
        str(installment.id),
        str(installment.loan_id),
        installment.status,
        receipt.borrower_score,
        receipt.loan_status,
    )
    return PaymentResponse(
        installment=InstallmentSchema.build(installment, today),
        loan_status=receipt.loan_status,
        borrower_score=receipt.borrower_score,
        payment=PaymentRecordSchema.model_validate(receipt.payment),
    )


@router.post("/payments", response_model=PaymentResponse)
def create_payment(
    request_body: PaymentRequest,
    request_id: str = Depends(get_request_id),
    today: date = Depends(get_today),
    service: PaymentService = Depends(get_payment_service),
):
    """
    Record full payment of an installment.

    Settles the installment, adjusts the borrower's CIBIL score, adds to the
    loan's amount paid and closes the loan once every installment is paid.
    """
    receipt = service.record_payment(
        installment_id=request_body.installment_id,
        payment_date=request_body.payment_date,
        payment_mode=request_body.payment_mode,
        is_lender_delay=request_body.is_lender_delay,
        notes=request_body.notes,
    )
    return payment_response(receipt, request_id, today)


@router.get("/payments/due-today", response_model=DueTodayResponse)
def get_due_today(today: date = Depends(get_today), service: PaymentService = Depends(get_payment_service)):
    due = service.list_due_today(today)
    return DueTodayResponse(
        installments=[CollectionEntrySchema.model_validate(entry) for entry in due.installments],
        total_due=due.total_due,
        count=due.count,
    )


@router.get("/payments", response_model=List[PaymentRecordSchema])
def list_payments(service: PaymentService = Depends(get_payment_service)):
    """Payment history, most recent first"""
    return [PaymentRecordSchema.model_validate(p) for p in service.list_payments()]


@router.patch("/payments/{installment_id}/mark-missed", response_model=MissedResponse)
def mark_missed(
    installment_id: uuid.UUID,
    today: date = Depends(get_today),
    service: PaymentService = Depends(get_payment_service),
):
    result = service.mark_as_missed(installment_id, today)

    missed_installments_counter.inc()
    record_score_adjustment(MISSED_PAYMENT_PENALTY)

    return MissedResponse(
        message="Installment marked as missed and CIBIL score updated",
        borrower_score=result.borrower_score,
    )
