"""Domain object -> response schema conversion shared by the v1 routers"""

from dataclasses import asdict

from finance_gateway.api.v1.schemas import (
    BillingPeriodSchema,
    PaymentSessionResponse,
    SessionGroupSchema,
    SessionResultsSchema,
    SessionTransactionSchema,
    TransactionSchema,
)
from finance_gateway.domain.billing_period import format_billing_period
from finance_gateway.domain.models import BillingPeriod, SessionTransaction, Transaction
from finance_gateway.services.payment_session import PaymentSession


def period_schema(period: BillingPeriod) -> BillingPeriodSchema:
    return BillingPeriodSchema(
        start_date=period.start_date,
        end_date=period.end_date,
        month=period.month,
        year=period.year,
        label=format_billing_period(period),
    )


def transaction_schema(transaction: Transaction) -> TransactionSchema:
    values = asdict(transaction)
    values.pop("order", None)
    return TransactionSchema(**values)


def session_transaction_schema(transaction: SessionTransaction) -> SessionTransactionSchema:
    return SessionTransactionSchema(**asdict(transaction))


def session_response(session: PaymentSession) -> PaymentSessionResponse:
    state = session.state
    selected = session.selected_transactions
    current = session.current_transaction

    return PaymentSessionResponse(
        session_id=session.session_id,
        user_id=session.user_id,
        phase=state.phase,
        reference_period=period_schema(session.reference_period),
        groups=[
            SessionGroupSchema(
                label=group.label,
                period=period_schema(group.period),
                transactions=[session_transaction_schema(t) for t in group.transactions],
            )
            for group in session.groups
        ],
        selected_ids=sorted(state.selected_ids),
        selected_count=len(selected),
        selected_total=session.selected_total,
        current_period_income=session.current_period_income,
        requires_warning=session.requires_warning,
        warning_acknowledged=state.warning_acknowledged,
        can_continue=session.can_continue,
        currency=session.currency,
        index=state.index,
        total=len(state.queue),
        current_transaction=session_transaction_schema(current) if current else None,
        results=SessionResultsSchema(
            paid=[session_transaction_schema(t) for t in state.results.paid],
            skipped=[session_transaction_schema(t) for t in state.results.skipped],
        ),
        is_processing=session.is_processing,
        last_error=session.last_error,
    )
