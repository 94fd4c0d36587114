"""Payment session state machine: selection -> runner -> summary

The reducer is a pure function; persistence and cache updates happen in the
service layer around it.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet, Sequence, Union

from finance_gateway.domain.exceptions import SessionStateError
from finance_gateway.domain.models import (
    PaymentSessionPhase,
    PaymentSessionState,
    SessionResult,
    SessionTransaction,
)


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SetSelectedIds:
    selected_ids: FrozenSet[str]
    warning_acknowledged: bool


@dataclass(frozen=True)
class SetSelection:
    selected_ids: FrozenSet[str]
    queue: Sequence[SessionTransaction]
    warning_acknowledged: bool


@dataclass(frozen=True)
class StartSession:
    pass


@dataclass(frozen=True)
class MarkPaid:
    transaction: SessionTransaction


@dataclass(frozen=True)
class Skip:
    transaction: SessionTransaction


@dataclass(frozen=True)
class Finish:
    pass


@dataclass(frozen=True)
class AckWarning:
    pass


PaymentSessionAction = Union[
    Reset, SetSelectedIds, SetSelection, StartSession, MarkPaid, Skip, Finish, AckWarning
]

initial_state = PaymentSessionState()


def _phase_for_queue(queue: Sequence[SessionTransaction]) -> PaymentSessionPhase:
    return PaymentSessionPhase.RUNNER if queue else PaymentSessionPhase.SELECTION


def _advance(state: PaymentSessionState, results: SessionResult) -> PaymentSessionState:
    next_index = state.index + 1
    phase = PaymentSessionPhase.SUMMARY if next_index >= len(state.queue) else state.phase
    return replace(state, index=next_index, results=results, phase=phase)


def _require_runner_item(state: PaymentSessionState) -> None:
    if state.phase != PaymentSessionPhase.RUNNER or state.index >= len(state.queue):
        raise SessionStateError(f"No transaction to process in phase {state.phase.value}")


def payment_session_reducer(state: PaymentSessionState, action: PaymentSessionAction) -> PaymentSessionState:
    """Return the state that follows action; state itself is never mutated"""
    if isinstance(action, Reset):
        return initial_state

    if isinstance(action, SetSelectedIds):
        return replace(
            state,
            selected_ids=frozenset(action.selected_ids),
            warning_acknowledged=action.warning_acknowledged,
        )

    if isinstance(action, SetSelection):
        queue = tuple(sorted(action.queue, key=lambda t: t.order))
        return replace(
            state,
            selected_ids=frozenset(action.selected_ids),
            queue=queue,
            index=0,
            results=SessionResult(),
            phase=_phase_for_queue(queue),
            warning_acknowledged=action.warning_acknowledged,
        )

    if isinstance(action, StartSession):
        return replace(state, phase=_phase_for_queue(state.queue))

    if isinstance(action, MarkPaid):
        _require_runner_item(state)
        results = replace(state.results, paid=state.results.paid + (action.transaction,))
        return _advance(state, results)

    if isinstance(action, Skip):
        _require_runner_item(state)
        results = replace(state.results, skipped=state.results.skipped + (action.transaction,))
        return _advance(state, results)

    if isinstance(action, Finish):
        return replace(state, phase=PaymentSessionPhase.SUMMARY)

    if isinstance(action, AckWarning):
        return replace(state, warning_acknowledged=True)

    return state


def current_transaction(state: PaymentSessionState):
    """Queue item under the cursor, or None once the queue is exhausted"""
    if state.index < len(state.queue):
        return state.queue[state.index]
    return None
