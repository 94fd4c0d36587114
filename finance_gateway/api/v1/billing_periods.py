"""GET /v1/billing-periods - billing period boundaries for a user"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from finance_gateway.api.v1.presenters import period_schema
from finance_gateway.api.v1.schemas import BillingPeriodResponse
from finance_gateway.api.dependencies import resolve_billing_day
from finance_gateway.domain.billing_period import (
    MAX_PERIOD_YEAR,
    MIN_PERIOD_YEAR,
    get_billing_period,
    get_current_billing_period,
    get_next_billing_period,
    get_previous_billing_period,
    is_current_billing_period,
)
from finance_gateway.domain.models import BillingPeriod
from finance_gateway.infrastructure.database.session import get_db

router = APIRouter()


def _period_response(period: BillingPeriod, cutoff_day: int) -> BillingPeriodResponse:
    return BillingPeriodResponse(
        period=period_schema(period),
        previous=period_schema(get_previous_billing_period(period, cutoff_day)),
        next=period_schema(get_next_billing_period(period, cutoff_day)),
        is_current=is_current_billing_period(period, cutoff_day=cutoff_day),
    )


@router.get("/billing-periods/current", response_model=BillingPeriodResponse)
def get_current_period(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Billing period containing today"""
    cutoff_day = resolve_billing_day(db, user_id)
    return _period_response(get_current_billing_period(cutoff_day=cutoff_day), cutoff_day)


@router.get("/billing-periods/{year}/{month}", response_model=BillingPeriodResponse)
def get_period(
    year: int = Path(..., ge=MIN_PERIOD_YEAR, le=MAX_PERIOD_YEAR),
    month: int = Path(..., ge=1, le=12),
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Billing period starting in the given month, with its neighbours"""
    cutoff_day = resolve_billing_day(db, user_id)
    return _period_response(get_billing_period(year, month, cutoff_day), cutoff_day)
