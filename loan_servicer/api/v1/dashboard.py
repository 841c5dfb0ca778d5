"""/v1/dashboard - portfolio statistics for the home screen"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from loan_servicer.api.dependencies import get_reporting_service, get_today
from loan_servicer.api.v1.schemas import (
    CollectionEntrySchema,
    DashboardStatsResponse,
    MonthlyCollectionsResponse,
    TopBorrowerSchema,
)
from loan_servicer.config import settings
from loan_servicer.services.reporting import ReportingService

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
def get_dashboard_stats(today: date = Depends(get_today), service: ReportingService = Depends(get_reporting_service)):
    return DashboardStatsResponse.model_validate(service.dashboard_stats(today))


@router.get("/dashboard/monthly-collections", response_model=MonthlyCollectionsResponse)
def get_monthly_collections(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Defaults to the current year"),
    today: date = Depends(get_today),
    service: ReportingService = Depends(get_reporting_service),
):
    return MonthlyCollectionsResponse.model_validate(service.monthly_collections(year or today.year))


@router.get("/dashboard/top-borrowers", response_model=List[TopBorrowerSchema])
def get_top_borrowers(service: ReportingService = Depends(get_reporting_service)):
    return [TopBorrowerSchema.model_validate(b) for b in service.top_borrowers(settings.top_borrowers_limit)]


@router.get("/dashboard/daily-collection", response_model=List[CollectionEntrySchema])
def get_daily_collection(today: date = Depends(get_today), service: ReportingService = Depends(get_reporting_service)):
    """Installments due today, then the next upcoming ones"""
    entries = service.daily_collection(today, settings.upcoming_collection_limit)
    return [CollectionEntrySchema.model_validate(e) for e in entries]
