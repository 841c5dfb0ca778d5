"""/v1/borrowers - borrower registry endpoints"""

import uuid
from datetime import date
from typing import List
from fastapi import APIRouter, Depends, Query

from loan_servicer.api.dependencies import get_borrower_service, get_today
from loan_servicer.api.v1.schemas import (
    BorrowerCreate,
    BorrowerDetailResponse,
    BorrowerSchema,
    BorrowerStats,
    BorrowerUpdate,
    CibilScoreUpdate,
    InstallmentSchema,
    LoanSchema,
    MessageResponse,
)
from loan_servicer.services.borrowers import BorrowerService

router = APIRouter()


@router.get("/borrowers", response_model=List[BorrowerSchema])
def list_borrowers(service: BorrowerService = Depends(get_borrower_service)):
    """All borrowers, alphabetically"""
    return [BorrowerSchema.model_validate(b) for b in service.list_borrowers()]


@router.get("/borrowers/search", response_model=List[BorrowerSchema])
def search_borrowers(
    query: str = Query("", description="Substring of name or phone number"),
    service: BorrowerService = Depends(get_borrower_service),
):
    return [BorrowerSchema.model_validate(b) for b in service.search(query)]


@router.get("/borrowers/{borrower_id}", response_model=BorrowerDetailResponse)
def get_borrower(
    borrower_id: uuid.UUID,
    today: date = Depends(get_today),
    service: BorrowerService = Depends(get_borrower_service),
):
    """
    Retrieve a borrower with loans, installments and outstanding balance.

    Outstanding balance counts unpaid installments on active loans only.
    """
    profile = service.get_profile(borrower_id)
    return BorrowerDetailResponse(
        borrower=BorrowerSchema.model_validate(profile.borrower),
        loans=[LoanSchema.model_validate(loan) for loan in profile.loans],
        installments=[InstallmentSchema.build(inst, today) for inst in profile.installments],
        stats=BorrowerStats(
            total_loans=profile.total_loans,
            active_loans=profile.active_loans,
            total_outstanding=profile.total_outstanding,
        ),
    )


@router.get("/borrowers/{borrower_id}/loans", response_model=List[LoanSchema])
def get_borrower_loans(borrower_id: uuid.UUID, service: BorrowerService = Depends(get_borrower_service)):
    return [LoanSchema.model_validate(loan) for loan in service.list_loans(borrower_id)]


@router.post("/borrowers", response_model=BorrowerSchema, status_code=201)
def create_borrower(request_body: BorrowerCreate, service: BorrowerService = Depends(get_borrower_service)):
    """Register a borrower; phone numbers are unique"""
    borrower = service.create_borrower(
        full_name=request_body.full_name,
        phone_number=request_body.phone_number,
        address=request_body.address,
        notes=request_body.notes,
    )
    return BorrowerSchema.model_validate(borrower)


@router.put("/borrowers/{borrower_id}", response_model=BorrowerSchema)
def update_borrower(
    borrower_id: uuid.UUID,
    request_body: BorrowerUpdate,
    service: BorrowerService = Depends(get_borrower_service),
):
    borrower = service.update_borrower(borrower_id, **request_body.model_dump(exclude_unset=True))
    return BorrowerSchema.model_validate(borrower)


@router.delete("/borrowers/{borrower_id}", response_model=MessageResponse)
def delete_borrower(borrower_id: uuid.UUID, service: BorrowerService = Depends(get_borrower_service)):
    """Delete a borrower; rejected while the borrower has loans"""
    service.delete_borrower(borrower_id)
    return MessageResponse(message="Borrower deleted successfully")


@router.patch("/borrowers/{borrower_id}/cibil", response_model=BorrowerSchema)
def update_cibil_score(
    borrower_id: uuid.UUID,
    request_body: CibilScoreUpdate,
    service: BorrowerService = Depends(get_borrower_service),
):
    borrower = service.set_cibil_score(borrower_id, request_body.cibil_score)
    return BorrowerSchema.model_validate(borrower)
