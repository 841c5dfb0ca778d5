"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from loan_servicer.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_loan_created(request_id: str, loan_id: str, borrower_id: str, principal: float, installments: int) -> None:
    """Log structured loan origination for audit"""
    logging.info(
        "Loan created",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "borrower_id": borrower_id,
            "step": "loan_created",
            "principal": principal,
            "installments": installments,
        },
    )


def log_payment(
    request_id: str,
    installment_id: str,
    loan_id: str,
    status: str,
    borrower_score: int,
    loan_status: str,
) -> None:
    """Log structured payment outcome for analysis"""
    logging.info(
        "Payment recorded",
        extra={
            "request_id": request_id,
            "installment_id": installment_id,
            "loan_id": loan_id,
            "step": "payment_recorded",
            "payment_outcome": status,
            "borrower_score": borrower_score,
            "loan_status": loan_status,
        },
    )
