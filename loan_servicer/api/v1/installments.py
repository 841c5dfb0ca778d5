"""/v1/installments - installment reads, edits and per-installment payment"""

import uuid
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from loan_servicer.api.dependencies import (
    get_installment_service,
    get_payment_service,
    get_request_id,
    get_today,
)
from loan_servicer.api.v1.payments import payment_response
from loan_servicer.api.v1.schemas import (
    InstallmentPaymentRequest,
    InstallmentSchema,
    InstallmentUpdate,
    PaymentResponse,
)
from loan_servicer.config import settings
from loan_servicer.domain.models import InstallmentStatus
from loan_servicer.services.installments import InstallmentService
from loan_servicer.services.payments import PaymentService

router = APIRouter()


@router.get("/installments", response_model=List[InstallmentSchema])
def list_installments(
    status: Optional[InstallmentStatus] = Query(None, description="Status as displayed, including Upcoming"),
    limit: int = Query(settings.installment_list_limit, ge=1, le=500),
    today: date = Depends(get_today),
    service: InstallmentService = Depends(get_installment_service),
):
    installments = service.list_installments(today, status=status, limit=limit)
    return [InstallmentSchema.build(inst, today) for inst in installments]


@router.get("/installments/loan/{loan_id}", response_model=List[InstallmentSchema])
def list_loan_installments(
    loan_id: uuid.UUID,
    today: date = Depends(get_today),
    service: InstallmentService = Depends(get_installment_service),
):
    return [InstallmentSchema.build(inst, today) for inst in service.list_by_loan(loan_id)]


@router.get("/installments/{installment_id}", response_model=InstallmentSchema)
def get_installment(
    installment_id: uuid.UUID,
    today: date = Depends(get_today),
    service: InstallmentService = Depends(get_installment_service),
):
    return InstallmentSchema.build(service.get_installment(installment_id), today)


@router.patch("/installments/{installment_id}", response_model=InstallmentSchema)
def update_installment(
    installment_id: uuid.UUID,
    request_body: InstallmentUpdate,
    today: date = Depends(get_today),
    service: InstallmentService = Depends(get_installment_service),
):
    """Edit notes, or correct the paid date of a paid installment"""
    installment = service.update_installment(installment_id, **request_body.model_dump(exclude_unset=True))
    return InstallmentSchema.build(installment, today)


@router.post("/installments/{installment_id}/payment", response_model=PaymentResponse)
def pay_installment(
    installment_id: uuid.UUID,
    request_body: InstallmentPaymentRequest,
    request_id: str = Depends(get_request_id),
    today: date = Depends(get_today),
    service: PaymentService = Depends(get_payment_service),
):
    """Record payment of this installment; payment date defaults to today"""
    receipt = service.record_payment(
        installment_id=installment_id,
        payment_date=request_body.payment_date or today,
        payment_mode=request_body.payment_mode,
        is_lender_delay=request_body.is_lender_delay,
        notes=request_body.notes,
    )
    return payment_response(receipt, request_id, today)
