"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_servicer.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_servicer.api.v1 import borrowers, dashboard, installments, loans, payments, reports
from loan_servicer.domain.exceptions import (
    ConflictError,
    DomainValidationError,
    NotFoundError,
    PersistenceError,
)
from loan_servicer.infrastructure.observability.logging import setup_logging
from loan_servicer.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def error_response(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "error": error})


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions onto HTTP status codes"""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Invalid request", str(exc.errors()))

    @app.exception_handler(DomainValidationError)
    async def validation_handler(request: Request, exc: DomainValidationError):
        return error_response(400, str(exc), type(exc).__name__)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return error_response(400, str(exc), type(exc).__name__)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return error_response(404, str(exc), f"{exc.entity} {exc.entity_id}")

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError):
        request_id = getattr(request.state, "request_id", "unknown")
        logging.error(f"Persistence error: {exc.__cause__ or exc}", extra={"request_id": request_id})
        detail = str(exc.__cause__ or exc) if settings.is_development else None
        return error_response(500, "Internal server error", detail)

    @app.exception_handler(Exception)
    async def unexpected_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "unknown")
        logging.exception(f"Unhandled error: {exc}", extra={"request_id": request_id})
        detail = str(exc) if settings.is_development else None
        return error_response(500, "Internal server error", detail)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Servicer",
        description="Microfinance borrower, loan, installment and payment service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=True,
    )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(borrowers.router, prefix="/v1", tags=["borrowers"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
