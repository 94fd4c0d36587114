"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from sqlalchemy.orm import Session
from finance_gateway.domain.billing_settings import get_billing_period_day
from finance_gateway.infrastructure.database.adapters import DatabaseBillingDayStore
from finance_gateway.services.payment_session import PaymentSessionRegistry

session_registry = PaymentSessionRegistry()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_registry() -> PaymentSessionRegistry:
    """Provide the in-memory registry of open payment sessions"""
    return session_registry


def resolve_billing_day(db: Session, user_id: str) -> int:
    """User's configured cutoff day, falling back to the last day of the month"""
    return get_billing_period_day(DatabaseBillingDayStore(db, user_id))
