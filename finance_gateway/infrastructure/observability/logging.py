"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from finance_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat()
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


def log_session_event(session_id: str, step: str, **fields: Any) -> None:
    """Log a payment session lifecycle step"""
    logging.getLogger("finance_gateway.payment_session").info(
        f"Payment session {step}",
        extra={"session_id": session_id, "step": step, **fields},
    )


def log_session_summary(session_id: str, paid_count: int, skipped_count: int, paid_total: Decimal) -> None:
    """Log the outcome of a finished session for analysis"""
    logging.getLogger("finance_gateway.payment_session").info(
        "Payment session completed",
        extra={
            "session_id": session_id,
            "step": "session_summary",
            "paid_count": paid_count,
            "skipped_count": skipped_count,
            "paid_total": str(paid_total),
        },
    )
