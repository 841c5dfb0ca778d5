"""/v1/reports - aggregate reports"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from loan_servicer.api.dependencies import get_reporting_service, get_today
from loan_servicer.api.v1.schemas import (
    CollectionDaySchema,
    CollectionEntrySchema,
    LoanSummaryRowSchema,
    OverdueReportResponse,
    ReportSummaryResponse,
)
from loan_servicer.domain.exceptions import DomainValidationError
from loan_servicer.services.reporting import ReportingService

router = APIRouter()


@router.get("/reports/loan-summary", response_model=List[LoanSummaryRowSchema])
def get_loan_summary(service: ReportingService = Depends(get_reporting_service)):
    """Loan count and principal grouped by status"""
    return [LoanSummaryRowSchema.model_validate(row) for row in service.loan_summary()]


@router.get("/reports/payment-collection", response_model=List[CollectionDaySchema])
def get_payment_collection(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: ReportingService = Depends(get_reporting_service),
):
    """Collections per payment day, optionally within [start_date, end_date]"""
    if start_date and end_date and start_date > end_date:
        raise DomainValidationError("start_date must not be after end_date")
    return [CollectionDaySchema.model_validate(day) for day in service.payment_collection(start_date, end_date)]


@router.get("/reports/overdue", response_model=OverdueReportResponse)
def get_overdue(today: date = Depends(get_today), service: ReportingService = Depends(get_reporting_service)):
    entries = service.overdue(today)
    return OverdueReportResponse(
        count=len(entries),
        data=[CollectionEntrySchema.model_validate(e) for e in entries],
    )


@router.get("/reports/summary", response_model=ReportSummaryResponse)
def get_report_summary(today: date = Depends(get_today), service: ReportingService = Depends(get_reporting_service)):
    return ReportSummaryResponse.model_validate(service.summary(today))
