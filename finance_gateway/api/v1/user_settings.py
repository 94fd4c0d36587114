"""GET/PUT /v1/settings/billing-day - billing cycle cutoff day"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import BillingDayResponse, BillingDayUpdate
from finance_gateway.api.dependencies import get_request_id, resolve_billing_day
from finance_gateway.domain.billing_settings import set_billing_period_day
from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.infrastructure.database.adapters import DatabaseBillingDayStore
from finance_gateway.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/settings/billing-day", response_model=BillingDayResponse)
def get_billing_day(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Configured cutoff day, or the last day of the current month when unset"""
    return BillingDayResponse(user_id=user_id, billing_day=resolve_billing_day(db, user_id))


@router.put("/settings/billing-day", response_model=BillingDayResponse)
def update_billing_day(
    request_body: BillingDayUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Store a new cutoff day.

    Days outside 1-31 are rejected with 422 and the stored value is kept.
    """
    try:
        set_billing_period_day(request_body.billing_day, DatabaseBillingDayStore(db, request_body.user_id))
    except ValidationError as e:
        logging.warning(f"Rejected billing day: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    return BillingDayResponse(user_id=request_body.user_id, billing_day=request_body.billing_day)
