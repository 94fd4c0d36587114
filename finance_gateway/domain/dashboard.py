"""Dashboard metrics over transactions and billing periods"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from finance_gateway.domain.billing_period import is_date_in_billing_period
from finance_gateway.domain.models import BillingPeriod, BurndownMonth, Transaction, TransactionType
from finance_gateway.utils.date_utils import add_months, generate_date_range, shift_month

ZERO = Decimal("0")


@dataclass
class CurrencyTotals:
    revenue: Decimal = ZERO
    expense: Decimal = ZERO
    balance: Decimal = ZERO


@dataclass
class PeriodTotals:
    income: Decimal
    expenses: Decimal
    balance: Decimal


@dataclass
class Change:
    amount: Decimal
    percentage: float


@dataclass
class PeriodComparison:
    current: PeriodTotals
    previous: PeriodTotals
    income_change: Change
    expenses_change: Change
    balance_change: Change


@dataclass
class PaymentPerformance:
    on_time_rate: float
    average_days_to_payment: int
    current_streak: int


@dataclass
class CashFlowPoint:
    date: date
    projected_balance: Decimal


@dataclass
class BillsDueSoon:
    today: List[Transaction] = field(default_factory=list)
    tomorrow: List[Transaction] = field(default_factory=list)
    this_week: List[Transaction] = field(default_factory=list)
    total: Decimal = ZERO


def calculate_savings_rate(income: Decimal, expenses: Decimal) -> float:
    """(income - expenses) / income as a percentage; 0 when there is no income"""
    if income == 0:
        return 0.0
    return float((income - expenses) / income * 100)


def _in_period(transactions: Iterable[Transaction], period: BillingPeriod, type: TransactionType) -> List[Transaction]:
    return [t for t in transactions if t.type == type and is_date_in_billing_period(t.due_date, period)]


def get_top_expenses(transactions: Iterable[Transaction], period: BillingPeriod, limit: int = 5) -> List[Transaction]:
    expenses = _in_period(transactions, period, TransactionType.EXPENSE)
    return sorted(expenses, key=lambda t: t.value, reverse=True)[:limit]


def get_billing_period_totals(transactions: Iterable[Transaction]) -> Dict[str, CurrencyTotals]:
    """Revenue, expense and balance per currency"""
    totals: Dict[str, CurrencyTotals] = {}
    for t in transactions:
        entry = totals.setdefault(t.currency, CurrencyTotals())
        if t.type == TransactionType.INCOME:
            entry.revenue += t.value
        else:
            entry.expense += t.value
        entry.balance = entry.revenue - entry.expense
    return totals


def calculate_period_totals(transactions: Iterable[Transaction], period: BillingPeriod) -> PeriodTotals:
    transactions = list(transactions)
    income = sum((t.value for t in _in_period(transactions, period, TransactionType.INCOME)), ZERO)
    expenses = sum((t.value for t in _in_period(transactions, period, TransactionType.EXPENSE)), ZERO)
    return PeriodTotals(income=income, expenses=expenses, balance=income - expenses)


def calculate_payment_performance(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> PaymentPerformance:
    """
    On-time metrics for expenses paid in the last 12 months.

    The paid date is taken from updated_at; a payment is on time when it
    happened on or before the due date.
    """
    today = today or date.today()
    twelve_months_ago = add_months(today, -12)

    paid_expenses = [
        t
        for t in transactions
        if t.type == TransactionType.EXPENSE
        and t.paid
        and t.updated_at is not None
        and t.updated_at.date() >= twelve_months_ago
    ]
    if not paid_expenses:
        return PaymentPerformance(on_time_rate=0.0, average_days_to_payment=0, current_streak=0)

    days_late = [(t.updated_at.date() - t.due_date).days for t in paid_expenses]
    on_time_count = sum(1 for d in days_late if d <= 0)

    # Streak of on-time payments counted back from the most recent one
    current_streak = 0
    for t in sorted(paid_expenses, key=lambda t: t.updated_at, reverse=True):
        if t.updated_at.date() > t.due_date:
            break
        current_streak += 1

    return PaymentPerformance(
        on_time_rate=on_time_count / len(paid_expenses) * 100,
        average_days_to_payment=round(sum(days_late) / len(paid_expenses)),
        current_streak=current_streak,
    )


def project_cash_flow(
    transactions: Iterable[Transaction],
    current_balance: Decimal,
    days: int,
    today: Optional[date] = None,
) -> List[CashFlowPoint]:
    """Daily running balance for today..today+days from unpaid scheduled transactions"""
    today = today or date.today()
    end_date = today + timedelta(days=days)

    daily_change: Dict[date, Decimal] = {}
    for t in transactions:
        if t.paid or not (today <= t.due_date <= end_date):
            continue
        change = t.value if t.type == TransactionType.INCOME else -t.value
        daily_change[t.due_date] = daily_change.get(t.due_date, ZERO) + change

    projection = []
    running_balance = current_balance
    for day in generate_date_range(today, end_date):
        running_balance += daily_change.get(day, ZERO)
        projection.append(CashFlowPoint(date=day, projected_balance=running_balance))

    return projection


def get_bills_due_this_week(transactions: Iterable[Transaction], today: Optional[date] = None) -> BillsDueSoon:
    """Unpaid expenses due today, tomorrow, and during the rest of the coming week"""
    today = today or date.today()
    tomorrow = today + timedelta(days=1)
    week_end = today + timedelta(days=7)

    bills = BillsDueSoon()
    for t in transactions:
        if t.type != TransactionType.EXPENSE or t.paid:
            continue
        if t.due_date == today:
            bills.today.append(t)
        elif t.due_date == tomorrow:
            bills.tomorrow.append(t)
        elif tomorrow < t.due_date < week_end:
            bills.this_week.append(t)
        else:
            continue
        bills.total += t.value

    return bills


def _change(current: Decimal, previous: Decimal, absolute_base: bool = False) -> Change:
    amount = current - previous
    base = abs(previous) if absolute_base else previous
    percentage = 0.0 if previous == 0 else float(amount / base * 100)
    return Change(amount=amount, percentage=percentage)


def compare_periods(
    transactions: Iterable[Transaction],
    current_period: BillingPeriod,
    previous_period: BillingPeriod,
) -> PeriodComparison:
    transactions = list(transactions)
    current = calculate_period_totals(transactions, current_period)
    previous = calculate_period_totals(transactions, previous_period)
    return PeriodComparison(
        current=current,
        previous=previous,
        income_change=_change(current.income, previous.income),
        expenses_change=_change(current.expenses, previous.expenses),
        balance_change=_change(current.balance, previous.balance, absolute_base=True),
    )


def calculate_payment_burndown(
    transactions: Iterable[Transaction],
    months: int = 6,
    today: Optional[date] = None,
) -> List[BurndownMonth]:
    """
    Monthly income, expenses and payments for the last `months` calendar months.

    Income and expenses are grouped by due month. Paid is the value of paid
    expenses grouped by the month they were marked paid (updated_at).
    Oldest month first, ending with the current month.
    """
    today = today or date.today()
    transactions = list(transactions)

    series = []
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)

        income = expenses = paid = ZERO
        for t in transactions:
            if (t.due_date.year, t.due_date.month) == (year, month):
                if t.type == TransactionType.INCOME:
                    income += t.value
                else:
                    expenses += t.value
            if (
                t.type == TransactionType.EXPENSE
                and t.paid
                and t.updated_at is not None
                and (t.updated_at.year, t.updated_at.month) == (year, month)
            ):
                paid += t.value

        month_start = date(year, month, 1)
        series.append(
            BurndownMonth(
                month_start=month_start,
                label=month_start.strftime("%b"),
                income=income,
                expenses=expenses,
                paid=paid,
            )
        )

    return series
