"""/v1/loans - loan origination and lifecycle endpoints"""

import uuid
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from loan_servicer.api.dependencies import get_loan_service, get_request_id, get_today
from loan_servicer.api.v1.schemas import (
    InstallmentSchema,
    LoanCreate,
    LoanDetailResponse,
    LoanSchema,
    LoanStatsSchema,
    LoanStatusUpdate,
)
from loan_servicer.domain.models import LoanStatus
from loan_servicer.infrastructure.observability.logging import log_loan_created
from loan_servicer.infrastructure.observability.metrics import loans_created_counter
from loan_servicer.services.loans import LoanService

router = APIRouter()


@router.get("/loans", response_model=List[LoanSchema])
def list_loans(service: LoanService = Depends(get_loan_service)):
    """All loans, newest first"""
    return [LoanSchema.model_validate(loan) for loan in service.list_loans()]


@router.get("/loans/filter", response_model=List[LoanSchema])
def filter_loans(
    status: Optional[LoanStatus] = Query(None),
    borrower_id: Optional[uuid.UUID] = Query(None),
    service: LoanService = Depends(get_loan_service),
):
    return [LoanSchema.model_validate(loan) for loan in service.filter_loans(status, borrower_id)]


@router.get("/loans/{loan_id}", response_model=LoanDetailResponse)
def get_loan(
    loan_id: uuid.UUID,
    today: date = Depends(get_today),
    service: LoanService = Depends(get_loan_service),
):
    """
    Retrieve a loan with its installment schedule.

    Returns:
        Loan, installments ordered by due date, and paid/remaining totals
    """
    details = service.get_details(loan_id)
    return LoanDetailResponse(
        loan=LoanSchema.model_validate(details.loan),
        installments=[InstallmentSchema.build(inst, today) for inst in details.installments],
        stats=LoanStatsSchema(
            total_paid=details.total_paid,
            remaining_amount=details.remaining_amount,
            paid_installments=details.paid_installments,
            remaining_installments=details.remaining_installments,
        ),
    )


@router.post("/loans", response_model=LoanSchema, status_code=201)
def create_loan(
    request_body: LoanCreate,
    request_id: str = Depends(get_request_id),
    service: LoanService = Depends(get_loan_service),
):
    """
    Originate a loan and generate its installment schedule.

    Flow:
    1. Compute total repayable and installment amount
    2. Generate the schedule (one installment per cycle)
    3. Persist loan and schedule in one transaction
    """
    loan = service.create_loan(**request_body.model_dump())

    loans_created_counter.inc()
    log_loan_created(request_id, str(loan.id), str(loan.borrower_id), loan.principal, loan.total_installments)

    return LoanSchema.model_validate(loan)


@router.patch("/loans/{loan_id}/status", response_model=LoanSchema)
def update_loan_status(
    loan_id: uuid.UUID,
    request_body: LoanStatusUpdate,
    service: LoanService = Depends(get_loan_service),
):
    return LoanSchema.model_validate(service.update_status(loan_id, request_body.status))


@router.post("/loans/{loan_id}/reconcile", response_model=LoanSchema)
def reconcile_loan(loan_id: uuid.UUID, service: LoanService = Depends(get_loan_service)):
    """Recompute amount paid from installments and close the loan if fully paid"""
    return LoanSchema.model_validate(service.reconcile(loan_id))
