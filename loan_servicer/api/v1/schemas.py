"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from loan_servicer.domain.installments import display_status
from loan_servicer.domain.models import InstallmentStatus, LoanStatus, PaymentMode


class ErrorResponse(BaseModel):
    """Body of every error response"""

    message: str
    error: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


# Borrowers

def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class BorrowerCreate(BaseModel):
    """Request body for POST /v1/borrowers"""

    full_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("full_name", "phone_number", "address")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return _strip_required(value)


class BorrowerUpdate(BaseModel):
    """Request body for PUT /v1/borrowers/{id}; omitted fields are left unchanged"""

    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    is_loyal: Optional[bool] = None

    @field_validator("full_name", "phone_number", "address")
    @classmethod
    def strip_provided(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _strip_required(value)


class CibilScoreUpdate(BaseModel):
    cibil_score: int


class BorrowerSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    phone_number: str
    address: str
    notes: str = ""
    cibil_score: int
    is_loyal: bool
    created_at: Optional[datetime] = None


class BorrowerBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    phone_number: str


# Loans

class LoanCreate(BaseModel):
    """Request body for POST /v1/loans"""

    borrower_id: uuid.UUID
    loan_date: date
    principal: float = Field(..., gt=0)
    interest_rate: float = Field(..., ge=0, description="Flat interest in percent of principal")
    total_installments: int = Field(..., ge=1)
    installment_cycle_days: int = Field(30, ge=1, description="Days between due dates")
    first_installment_date: date
    purpose: str = ""
    status: LoanStatus = LoanStatus.ACTIVE


class LoanStatusUpdate(BaseModel):
    status: LoanStatus


class LoanSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    borrower_id: uuid.UUID
    borrower: Optional[BorrowerBrief] = None
    loan_date: date
    principal: float
    interest_rate: float
    total_installments: int
    installment_cycle_days: int
    first_installment_date: date
    total_repayable: float
    installment_amount: float
    purpose: str = ""
    status: LoanStatus
    amount_paid: float
    created_at: Optional[datetime] = None


# Installments

class InstallmentSchema(BaseModel):
    """Installment as displayed; unpaid future installments read as Upcoming"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    loan_id: uuid.UUID
    installment_number: int
    due_date: date
    amount: float
    status: InstallmentStatus
    paid_amount: float
    paid_date: Optional[date] = None
    payment_mode: PaymentMode
    notes: str = ""

    @classmethod
    def build(cls, installment, today: date) -> "InstallmentSchema":
        view = cls.model_validate(installment)
        view.status = display_status(installment.status, installment.due_date, today)
        return view


class InstallmentUpdate(BaseModel):
    """Request body for PATCH /v1/installments/{id}"""

    model_config = ConfigDict(extra="forbid")

    notes: Optional[str] = None
    paid_date: Optional[date] = None


# Payments

class InstallmentPaymentRequest(BaseModel):
    """Request body for POST /v1/installments/{id}/payment"""

    payment_date: Optional[date] = None  # defaults to today
    payment_mode: PaymentMode = PaymentMode.CASH
    is_lender_delay: bool = False
    notes: Optional[str] = None

    @field_validator("payment_mode")
    @classmethod
    def reject_none_mode(cls, value: PaymentMode) -> PaymentMode:
        if value == PaymentMode.NONE:
            raise ValueError('Payment mode must be "cash", "online", or "advance"')
        return value


class PaymentRequest(InstallmentPaymentRequest):
    """Request body for POST /v1/payments"""

    installment_id: uuid.UUID
    payment_date: date
    payment_mode: PaymentMode


class PaymentRecordSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    loan_id: uuid.UUID
    borrower_name: str
    amount: float
    payment_date: Optional[date] = None
    payment_mode: PaymentMode
    status: InstallmentStatus
    notes: str = ""
    is_lender_delay: bool = False


class PaymentResponse(BaseModel):
    installment: InstallmentSchema
    loan_status: LoanStatus
    borrower_score: int
    payment: PaymentRecordSchema


class MissedResponse(BaseModel):
    message: str
    borrower_score: int


class CollectionEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    installment_id: uuid.UUID
    installment_number: int
    loan_id: uuid.UUID
    borrower_id: uuid.UUID
    borrower_name: str
    phone_number: str
    address: str
    due_date: date
    amount: float
    status: InstallmentStatus
    days_overdue: int = 0


class DueTodayResponse(BaseModel):
    installments: List[CollectionEntrySchema]
    total_due: float
    count: int


# Detail views

class BorrowerStats(BaseModel):
    total_loans: int
    active_loans: int
    total_outstanding: float


class BorrowerDetailResponse(BaseModel):
    borrower: BorrowerSchema
    loans: List[LoanSchema]
    installments: List[InstallmentSchema]
    stats: BorrowerStats


class LoanStatsSchema(BaseModel):
    total_paid: float
    remaining_amount: float
    paid_installments: int
    remaining_installments: int


class LoanDetailResponse(BaseModel):
    loan: LoanSchema
    installments: List[InstallmentSchema]
    stats: LoanStatsSchema


# Dashboard & reports

class LoanCountsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    active_loans: int
    closed_loans: int
    total_loans: int


class InstallmentCountsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    today_installments: int
    today_due_amount: float
    overdue_installments: int
    total_installments: int
    paid_installments: int
    advance_paid_installments: int
    unpaid_installments: int
    upcoming_installments: int


class CollectionStatsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_recovered: float
    advance_collected: float
    total_collected: float


class DashboardStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_invested_amount: float
    total_recovered_amount: float
    advance_collected_amount: float
    total_profit: float
    pending_amount: float
    overdue_amount: float
    active_loan_count: int
    total_borrower_count: int
    loan_stats: LoanCountsSchema
    installment_stats: InstallmentCountsSchema
    collection_stats: CollectionStatsSchema


class MonthlyCollectionsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    months: List[str]
    collections: List[float]
    total_collection: float


class TopBorrowerSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    phone_number: str
    cibil_score: int
    is_loyal: bool
    active_loans_count: int
    total_loan_amount: float


class LoanSummaryRowSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: LoanStatus
    count: int
    total_amount: float


class CollectionDaySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    paid_on: date
    total_amount: float
    count: int


class OverdueReportResponse(BaseModel):
    count: int
    data: List[CollectionEntrySchema]


class ReportSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_borrowers: int
    active_loans: int
    completed_loans: int
    total_principal: float
    total_collected: float
    outstanding_amount: float
    total_interest_earned: float
    collection_rate: float
    this_month_collections: float
    last_month_collections: float
    month_over_month_change: Optional[float] = None
