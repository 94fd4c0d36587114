"""Unit tests for grouping unpaid expenses into billing periods"""

from datetime import date
from decimal import Decimal
from finance_gateway.domain.billing_period import get_billing_period
from finance_gateway.domain.grouping import (
    calculate_selected_total,
    format_period_label,
    get_current_period_income,
    group_expenses_by_period,
    requires_overspending_warning,
    resolve_transaction_period,
    to_session_transaction,
)
from finance_gateway.domain.models import TransactionType

CUTOFF = 15
SELECTED = get_billing_period(2025, 10, CUTOFF)  # Oct 15 - Nov 15
PREVIOUS = get_billing_period(2025, 9, CUTOFF)  # Sep 15 - Oct 15
FUTURE = get_billing_period(2025, 11, CUTOFF)  # Nov 15 - Dec 15


def ids(group):
    return [t.id for t in group.transactions]


def test_orders_groups_current_first_and_labels_current(make_transaction):
    transactions = [
        make_transaction(id="previous", due_date=date(2025, 9, 20)),
        make_transaction(id="selected", due_date=date(2025, 10, 20)),
        make_transaction(id="future", due_date=date(2025, 11, 20)),
    ]

    groups, reference = group_expenses_by_period(transactions, SELECTED, CUTOFF)

    assert reference == SELECTED
    assert len(groups) == 2
    assert groups[0].label == "October 2025 (current)"
    assert ids(groups[0]) == ["selected"]
    assert groups[1].label == "September 2025"
    assert ids(groups[1]) == ["previous"]


def test_due_date_before_cutoff_belongs_to_previous_period(make_transaction):
    """Test day 3 with cutoff 15 is owned by the period that started last month"""
    transaction = make_transaction(due_date=date(2025, 10, 3))

    assert resolve_transaction_period(transaction, CUTOFF) == PREVIOUS

    groups, _ = group_expenses_by_period([transaction], SELECTED, CUTOFF)

    assert len(groups) == 1
    assert groups[0].period == PREVIOUS


def test_due_date_on_cutoff_belongs_to_its_month(make_transaction):
    transaction = make_transaction(due_date=date(2025, 10, 15))

    assert resolve_transaction_period(transaction, CUTOFF) == SELECTED


def test_excludes_future_periods(make_transaction):
    transaction = make_transaction(id="future", due_date=FUTURE.start_date)

    groups, _ = group_expenses_by_period([transaction], PREVIOUS, CUTOFF)

    assert groups == []


def test_excludes_paid_and_income(make_transaction):
    transactions = [
        make_transaction(id="paid", due_date=date(2025, 10, 20), paid=True),
        make_transaction(id="income", type=TransactionType.INCOME, due_date=date(2025, 10, 20)),
        make_transaction(id="unpaid", due_date=date(2025, 10, 20)),
    ]

    groups, _ = group_expenses_by_period(transactions, SELECTED, CUTOFF)

    assert [t.id for g in groups for t in g.transactions] == ["unpaid"]


def test_sorts_by_due_date_then_name_within_group(make_transaction):
    transactions = [
        make_transaction(id="late", name="Alpha", due_date=date(2025, 10, 30)),
        make_transaction(id="early-b", name="Bravo", due_date=date(2025, 10, 18)),
        make_transaction(id="early-a", name="Alpha", due_date=date(2025, 10, 18)),
    ]

    groups, _ = group_expenses_by_period(transactions, SELECTED, CUTOFF)

    assert ids(groups[0]) == ["early-a", "early-b", "late"]


def test_assigns_increasing_order_across_groups(make_transaction):
    transactions = [
        make_transaction(id="old", due_date=date(2025, 8, 20)),
        make_transaction(id="previous", due_date=date(2025, 9, 20)),
        make_transaction(id="selected-second", due_date=date(2025, 10, 28)),
        make_transaction(id="selected-first", due_date=date(2025, 10, 18)),
    ]

    groups, _ = group_expenses_by_period(transactions, SELECTED, CUTOFF)

    flattened = [t for g in groups for t in g.transactions]
    assert [t.id for t in flattened] == ["selected-first", "selected-second", "previous", "old"]
    assert [t.order for t in flattened] == [0, 1, 2, 3]


def test_output_independent_of_input_order(make_transaction):
    transactions = [
        make_transaction(id=f"t{i}", name=f"Bill {i % 3}", due_date=date(2025, 8 + i % 3, 16 + i))
        for i in range(9)
    ]

    forward, _ = group_expenses_by_period(transactions, SELECTED, CUTOFF)
    backward, _ = group_expenses_by_period(list(reversed(transactions)), SELECTED, CUTOFF)

    assert [(t.id, t.order) for g in forward for t in g.transactions] == [
        (t.id, t.order) for g in backward for t in g.transactions
    ]


def test_defaults_to_configured_day_and_current_period(billing_day_store, make_transaction):
    billing_day_store.save(1)
    transaction = make_transaction(due_date=date(2000, 1, 10))

    groups, reference = group_expenses_by_period([transaction])

    assert reference.start_date.day == 1
    assert groups[0].period == get_billing_period(2000, 1, 1)


def test_format_period_label():
    assert format_period_label(SELECTED, SELECTED) == "October 2025 (current)"
    assert format_period_label(PREVIOUS, SELECTED) == "September 2025"


def test_calculate_selected_total(make_transaction):
    selected = [
        to_session_transaction(make_transaction(value="10.50"), 0),
        to_session_transaction(make_transaction(value="29.50"), 1),
    ]

    assert calculate_selected_total(selected) == Decimal("40.00")
    assert calculate_selected_total([]) == Decimal("0")


def test_get_current_period_income_only_counts_period_income(make_transaction):
    transactions = [
        make_transaction(type=TransactionType.INCOME, value="1000.00", due_date=date(2025, 10, 20)),
        make_transaction(type=TransactionType.INCOME, value="500.00", due_date=date(2025, 11, 15)),
        make_transaction(type=TransactionType.INCOME, value="200.00", due_date=date(2025, 10, 14)),
        make_transaction(type=TransactionType.EXPENSE, value="300.00", due_date=date(2025, 10, 20)),
    ]

    assert get_current_period_income(transactions, SELECTED) == Decimal("1000.00")


def test_requires_overspending_warning():
    assert requires_overspending_warning(Decimal("500"), 2, Decimal("300")) is True
    assert requires_overspending_warning(Decimal("300"), 2, Decimal("300")) is False
    assert requires_overspending_warning(Decimal("0"), 0, Decimal("-1")) is False


def test_to_session_transaction_keeps_fields(make_transaction):
    transaction = make_transaction(id="abc", value="12.34")

    session_transaction = to_session_transaction(transaction, 7)

    assert session_transaction.id == "abc"
    assert session_transaction.value == Decimal("12.34")
    assert session_transaction.order == 7
    assert to_session_transaction(session_transaction, 2).order == 2
