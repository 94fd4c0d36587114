"""Guided "mark bills as paid" workflow around the payment session reducer"""

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from finance_gateway.config import settings
from finance_gateway.domain.billing_period import get_current_billing_period
from finance_gateway.domain.billing_settings import get_billing_period_day
from finance_gateway.domain.exceptions import SessionNotFoundError, SessionStateError, TransientPersistenceError
from finance_gateway.domain.grouping import (
    calculate_selected_total,
    get_current_period_income,
    group_expenses_by_period,
    requires_overspending_warning,
)
from finance_gateway.domain.models import (
    BillingPeriod,
    PaidStatusResult,
    PaymentSessionPhase,
    PaymentSessionState,
    SessionPeriodGroup,
    SessionTransaction,
    Transaction,
)
from finance_gateway.domain.payment_session import (
    AckWarning,
    MarkPaid,
    PaymentSessionAction,
    Reset,
    SetSelectedIds,
    SetSelection,
    Skip,
    current_transaction,
    initial_state,
    payment_session_reducer,
)
from finance_gateway.infrastructure.observability.logging import log_session_event, log_session_summary
from finance_gateway.infrastructure.observability.metrics import (
    mark_paid_failure_counter,
    record_session_item,
    sessions_opened_counter,
)

logger = logging.getLogger(__name__)


class PaidStatusWriter(Protocol):
    """Persistence port for a transaction's paid flag"""

    async def set_paid_status(self, transaction_id: str, paid: bool) -> PaidStatusResult:
        ...


class TransactionCache:
    """Client-side copy of the user's transactions, updated optimistically"""

    def __init__(self, transactions: Iterable[Transaction] = ()):
        self._transactions: List[Transaction] = list(transactions)

    def all(self) -> List[Transaction]:
        return list(self._transactions)

    def set_paid(self, transaction_id: str, paid: bool) -> None:
        self._transactions = [
            replace(t, paid=paid) if t.id == transaction_id else t for t in self._transactions
        ]


class PaymentSession:
    """
    One open payment session dialog.

    Owns the reducer state plus the processing flag that blocks input while a
    mark-paid call is in flight.
    """

    def __init__(
        self,
        cache: TransactionCache,
        reference_period: Optional[BillingPeriod] = None,
        cutoff_day: Optional[int] = None,
        session_id: Optional[str] = None,
        notifier: Optional[Callable[[str], None]] = None,
        user_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.user_id = user_id
        self.cache = cache
        self.cutoff_day = cutoff_day if cutoff_day is not None else get_billing_period_day()
        self.reference_period = reference_period or get_current_billing_period(cutoff_day=self.cutoff_day)
        self.notifier = notifier
        self.state: PaymentSessionState = initial_state
        self.is_processing = False
        self.last_error: Optional[str] = None

    def dispatch(self, action: PaymentSessionAction) -> PaymentSessionState:
        self.state = payment_session_reducer(self.state, action)
        return self.state

    # Derived views

    @property
    def groups(self) -> List[SessionPeriodGroup]:
        groups, _ = group_expenses_by_period(self.cache.all(), self.reference_period, self.cutoff_day)
        return groups

    @property
    def session_transactions(self) -> List[SessionTransaction]:
        return [t for group in self.groups for t in group.transactions]

    @property
    def selected_transactions(self) -> List[SessionTransaction]:
        if not self.state.selected_ids:
            return []
        return [t for t in self.session_transactions if t.id in self.state.selected_ids]

    @property
    def selected_total(self) -> Decimal:
        return calculate_selected_total(self.selected_transactions)

    @property
    def current_period_income(self) -> Decimal:
        return get_current_period_income(self.cache.all(), self.reference_period)

    @property
    def requires_warning(self) -> bool:
        selected = self.selected_transactions
        return requires_overspending_warning(
            calculate_selected_total(selected), len(selected), self.current_period_income
        )

    @property
    def can_continue(self) -> bool:
        return len(self.selected_transactions) > 0 and (
            not self.requires_warning or self.state.warning_acknowledged
        )

    @property
    def current_transaction(self) -> Optional[SessionTransaction]:
        return current_transaction(self.state)

    @property
    def currency(self) -> str:
        for candidates in (self.selected_transactions, self.session_transactions):
            if candidates:
                return candidates[0].currency
        return settings.default_currency

    # User actions

    def open(self) -> None:
        """Fresh selection; the warning only triggers once over-budget items are picked"""
        self.is_processing = False
        self.last_error = None
        self.dispatch(Reset())
        self.dispatch(SetSelectedIds(selected_ids=frozenset(), warning_acknowledged=True))
        sessions_opened_counter.inc()
        log_session_event(self.session_id, "opened", available=len(self.session_transactions))

    def toggle(self, transaction_id: str) -> None:
        if self.state.phase != PaymentSessionPhase.SELECTION:
            raise SessionStateError("Selection can only change before the session starts")

        available = self.session_transactions
        if transaction_id not in {t.id for t in available}:
            raise SessionStateError(f"Transaction {transaction_id} is not payable in this session")

        selected = set(self.state.selected_ids)
        if transaction_id in selected:
            selected.remove(transaction_id)
        else:
            selected.add(transaction_id)

        chosen = [t for t in available if t.id in selected]
        warning = requires_overspending_warning(
            calculate_selected_total(chosen), len(chosen), self.current_period_income
        )
        self.dispatch(SetSelectedIds(selected_ids=frozenset(selected), warning_acknowledged=not warning))

    def acknowledge_warning(self) -> None:
        self.dispatch(AckWarning())

    def continue_session(self) -> None:
        """Freeze the selected transactions into the processing queue"""
        if self.state.phase != PaymentSessionPhase.SELECTION:
            raise SessionStateError("Session already started")
        if not self.can_continue:
            raise SessionStateError("Select at least one bill and acknowledge the overspending warning")

        queue = sorted(self.selected_transactions, key=lambda t: t.order)
        self.dispatch(
            SetSelection(selected_ids=self.state.selected_ids, queue=tuple(queue), warning_acknowledged=True)
        )
        log_session_event(self.session_id, "runner_started", queued=len(queue))

    def _require_current(self) -> SessionTransaction:
        if self.is_processing:
            raise SessionStateError("A payment is still being processed")
        transaction = self.current_transaction
        if transaction is None or self.state.phase != PaymentSessionPhase.RUNNER:
            raise SessionStateError("No transaction to process")
        return transaction

    def skip(self) -> None:
        transaction = self._require_current()
        self.dispatch(Skip(transaction=transaction))
        record_session_item("skipped")
        log_session_event(self.session_id, "item_skipped", transaction_id=transaction.id)
        self._log_if_finished()

    async def mark_paid(self, writer: PaidStatusWriter) -> PaidStatusResult:
        """
        Mark the current transaction as paid.

        The cache is updated and the cursor advanced before persisting. If
        persisting fails the cache flag is rolled back and the error recorded,
        but the cursor stays where it is.
        """
        transaction = self._require_current()
        self.is_processing = True
        self.last_error = None

        self.cache.set_paid(transaction.id, True)
        self.dispatch(MarkPaid(transaction=replace(transaction, paid=True)))

        try:
            result = await writer.set_paid_status(transaction.id, True)
            if not result.success:
                raise TransientPersistenceError(result.error or "Failed to update transaction")
        except TransientPersistenceError as e:
            self.cache.set_paid(transaction.id, False)
            self.last_error = str(e)
            mark_paid_failure_counter.inc()
            logger.warning(
                f"Mark paid failed: {e}",
                extra={"session_id": self.session_id, "transaction_id": transaction.id, "step": "mark_paid_failed"},
            )
            if self.notifier:
                self.notifier(self.last_error)
            result = PaidStatusResult(success=False, error=self.last_error)
        except Exception:
            self.cache.set_paid(transaction.id, False)
            raise
        else:
            record_session_item("paid")
            log_session_event(self.session_id, "item_paid", transaction_id=transaction.id)
        finally:
            self.is_processing = False

        self._log_if_finished()
        return result

    def close(self) -> None:
        """Discard in-progress state; already persisted payments stay paid"""
        self.dispatch(Reset())
        self.is_processing = False
        log_session_event(self.session_id, "closed")

    def _log_if_finished(self) -> None:
        if self.state.phase == PaymentSessionPhase.SUMMARY:
            log_session_summary(
                self.session_id,
                paid_count=len(self.state.results.paid),
                skipped_count=len(self.state.results.skipped),
                paid_total=calculate_selected_total(self.state.results.paid),
            )


class PaymentSessionRegistry:
    """
    Open payment sessions kept in memory, keyed by session id.

    Sessions that are never closed would otherwise accumulate, so the registry
    holds at most max_sessions and evicts the oldest one when a new session
    arrives at capacity.
    """

    def __init__(self, max_sessions: Optional[int] = None):
        self.max_sessions = max_sessions if max_sessions is not None else settings.max_payment_sessions
        self._sessions: Dict[str, PaymentSession] = {}

    def add(self, session: PaymentSession) -> PaymentSession:
        self._sessions.pop(session.session_id, None)
        while len(self._sessions) >= self.max_sessions:
            # Dicts keep insertion order, so the first key is the oldest session
            evicted = self._sessions.pop(next(iter(self._sessions)))
            log_session_event(evicted.session_id, "evicted", open_sessions=len(self._sessions))
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> PaymentSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Payment session {session_id} not found")
        return session

    def remove(self, session_id: str) -> PaymentSession:
        session = self.get(session_id)
        del self._sessions[session_id]
        return session

    def __len__(self) -> int:
        return len(self._sessions)
