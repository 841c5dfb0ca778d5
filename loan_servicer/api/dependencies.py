"""Dependency injection for FastAPI endpoints"""

from datetime import date
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from loan_servicer.infrastructure.database.session import get_db
from loan_servicer.services.borrowers import BorrowerService
from loan_servicer.services.installments import InstallmentService
from loan_servicer.services.loans import LoanService
from loan_servicer.services.payments import PaymentService
from loan_servicer.services.reporting import ReportingService
from loan_servicer.utils.date_utils import today


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Business date used for due-date comparisons"""
    return today()


def get_borrower_service(db: Session = Depends(get_db)) -> BorrowerService:
    return BorrowerService(db)


def get_loan_service(db: Session = Depends(get_db)) -> LoanService:
    return LoanService(db)


def get_installment_service(db: Session = Depends(get_db)) -> InstallmentService:
    return InstallmentService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_reporting_service(db: Session = Depends(get_db)) -> ReportingService:
    return ReportingService(db)
