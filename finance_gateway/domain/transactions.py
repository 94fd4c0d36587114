"""Transaction ordering and due-date helpers"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from finance_gateway.domain.models import Priority, Transaction

PRIORITY_ORDER = {
    Priority.VERY_HIGH: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
    Priority.VERY_LOW: 4,
}


def sort_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Unpaid first, then by priority (most urgent first), then newest created first"""
    # Stable sorts applied from the least to the most significant key
    result = sorted(transactions, key=lambda t: t.created_at or datetime.min, reverse=True)
    result.sort(key=lambda t: PRIORITY_ORDER[Priority(t.priority)])
    result.sort(key=lambda t: t.paid)
    return result


def is_transaction_overdue(due_date: date, paid: bool, today: Optional[date] = None) -> bool:
    if paid:
        return False
    return due_date < (today or date.today())


def is_transaction_due_today(due_date: date, paid: bool, today: Optional[date] = None) -> bool:
    if paid:
        return False
    return due_date == (today or date.today())
