"""Grouping of unpaid expenses into billing periods for payment sessions"""

import calendar
from dataclasses import asdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from finance_gateway.domain.billing_period import (
    get_billing_period,
    get_current_billing_period,
    get_previous_billing_period,
    is_date_in_billing_period,
    is_same_billing_period,
)
from finance_gateway.domain.billing_settings import get_billing_period_day
from finance_gateway.domain.models import (
    BillingPeriod,
    SessionPeriodGroup,
    SessionTransaction,
    Transaction,
    TransactionType,
)


def resolve_transaction_period(transaction: Transaction, cutoff_day: int) -> BillingPeriod:
    """
    Billing period owning the transaction's due date.

    The period anchored on the due date's month starts on the cutoff day; due
    dates earlier in that month belong to the period that started the month before.
    """
    due = transaction.due_date
    natural = get_billing_period(due.year, due.month, cutoff_day)
    if is_date_in_billing_period(due, natural):
        return natural
    return get_previous_billing_period(natural, cutoff_day)


def format_period_label(period: BillingPeriod, reference_period: BillingPeriod) -> str:
    """"{Month} {Year}", suffixed with " (current)" for the reference period"""
    label = f"{calendar.month_name[period.start_date.month]} {period.year}"
    if is_same_billing_period(period, reference_period):
        return f"{label} (current)"
    return label


def to_session_transaction(transaction: Transaction, order: int = 0) -> SessionTransaction:
    values = asdict(transaction)
    values["order"] = order
    return SessionTransaction(**values)


def group_expenses_by_period(
    transactions: Iterable[Transaction],
    reference_period: Optional[BillingPeriod] = None,
    cutoff_day: Optional[int] = None,
) -> Tuple[List[SessionPeriodGroup], BillingPeriod]:
    """
    Bucket unpaid expenses by billing period, up to and including reference_period.

    Returns (groups, reference_period). Groups are ordered newest period first,
    transactions within a group by due date then name, and every transaction
    gets a globally increasing order in that flattened sequence.
    """
    day = cutoff_day if cutoff_day is not None else get_billing_period_day()
    reference = reference_period or get_current_billing_period(cutoff_day=day)

    buckets: Dict[Tuple[int, int], SessionPeriodGroup] = {}
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE or transaction.paid:
            continue

        period = resolve_transaction_period(transaction, day)
        # Bills from future periods cannot be paid in this session
        if period.start_date > reference.start_date:
            continue

        key = (period.year, period.month)
        group = buckets.get(key)
        if group is None:
            group = SessionPeriodGroup(label=format_period_label(period, reference), period=period)
            buckets[key] = group
        group.transactions.append(to_session_transaction(transaction))

    groups = sorted(buckets.values(), key=lambda g: g.period.start_date, reverse=True)

    order = 0
    for group in groups:
        group.transactions.sort(key=lambda t: (t.due_date, t.name))
        for transaction in group.transactions:
            transaction.order = order
            order += 1

    return groups, reference


def calculate_selected_total(selected: Iterable[Transaction]) -> Decimal:
    return sum((Decimal(t.value) for t in selected), Decimal("0"))


def get_current_period_income(transactions: Iterable[Transaction], period: BillingPeriod) -> Decimal:
    """Total income due inside the period"""
    return sum(
        (
            Decimal(t.value)
            for t in transactions
            if t.type == TransactionType.INCOME and is_date_in_billing_period(t.due_date, period)
        ),
        Decimal("0"),
    )


def requires_overspending_warning(selected_total: Decimal, selected_count: int, income: Decimal) -> bool:
    """Selected bills exceed the period's income (never for an empty selection)"""
    return selected_count > 0 and selected_total > income
