"""Payment session endpoints: select unpaid bills, then mark each as paid or skip it"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from finance_gateway.api.v1.presenters import session_response
from finance_gateway.api.v1.schemas import PaymentSessionCreateRequest, PaymentSessionResponse, ToggleRequest
from finance_gateway.api.dependencies import get_session_registry, resolve_billing_day
from finance_gateway.domain.billing_period import get_billing_period
from finance_gateway.infrastructure.database.adapters import RepositoryPaidStatusWriter
from finance_gateway.infrastructure.database.repositories import TransactionRepository
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.services.payment_session import PaymentSession, PaymentSessionRegistry, TransactionCache

router = APIRouter()


@router.post("/payment-sessions", response_model=PaymentSessionResponse, status_code=201)
def open_session(
    request_body: PaymentSessionCreateRequest,
    db: Session = Depends(get_db),
    registry: PaymentSessionRegistry = Depends(get_session_registry),
):
    """
    Open a session over the user's unpaid expenses.

    Expenses are grouped up to the requested billing period (current period
    when year/month are omitted); later periods are not offered.
    """
    cutoff_day = resolve_billing_day(db, request_body.user_id)
    reference_period = None
    if request_body.year is not None and request_body.month is not None:
        reference_period = get_billing_period(request_body.year, request_body.month, cutoff_day)

    cache = TransactionCache(TransactionRepository(db, request_body.user_id).list_transactions())
    session = PaymentSession(
        cache,
        reference_period=reference_period,
        cutoff_day=cutoff_day,
        user_id=request_body.user_id,
    )
    session.open()
    registry.add(session)
    return session_response(session)


@router.get("/payment-sessions/{session_id}", response_model=PaymentSessionResponse)
def get_session(session_id: str, registry: PaymentSessionRegistry = Depends(get_session_registry)):
    return session_response(registry.get(session_id))


@router.post("/payment-sessions/{session_id}/toggle", response_model=PaymentSessionResponse)
def toggle_transaction(
    session_id: str,
    request_body: ToggleRequest,
    registry: PaymentSessionRegistry = Depends(get_session_registry),
):
    """Add or remove one bill from the selection"""
    session = registry.get(session_id)
    session.toggle(request_body.transaction_id)
    return session_response(session)


@router.post("/payment-sessions/{session_id}/acknowledge-warning", response_model=PaymentSessionResponse)
def acknowledge_warning(session_id: str, registry: PaymentSessionRegistry = Depends(get_session_registry)):
    session = registry.get(session_id)
    session.acknowledge_warning()
    return session_response(session)


@router.post("/payment-sessions/{session_id}/continue", response_model=PaymentSessionResponse)
def continue_session(session_id: str, registry: PaymentSessionRegistry = Depends(get_session_registry)):
    """Freeze the selection into the processing queue (409 while blocked by the warning)"""
    session = registry.get(session_id)
    session.continue_session()
    return session_response(session)


@router.post("/payment-sessions/{session_id}/skip", response_model=PaymentSessionResponse)
def skip_transaction(session_id: str, registry: PaymentSessionRegistry = Depends(get_session_registry)):
    session = registry.get(session_id)
    session.skip()
    return session_response(session)


@router.post("/payment-sessions/{session_id}/mark-paid", response_model=PaymentSessionResponse)
async def mark_paid(
    session_id: str,
    db: Session = Depends(get_db),
    registry: PaymentSessionRegistry = Depends(get_session_registry),
):
    """
    Mark the current bill as paid and move to the next one.

    A failed save is reported in last_error; the session still moves on.
    """
    session = registry.get(session_id)
    await session.mark_paid(RepositoryPaidStatusWriter(db, session.user_id))
    return session_response(session)


@router.delete("/payment-sessions/{session_id}", status_code=204)
def close_session(session_id: str, registry: PaymentSessionRegistry = Depends(get_session_registry)):
    """Close the dialog; unprocessed bills are left untouched"""
    session = registry.remove(session_id)
    session.close()
    return Response(status_code=204)
