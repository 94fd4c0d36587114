"""Spending category totals"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List

from finance_gateway.domain.models import CategoryTotal, SpendingCategory, SpendingEntry


def is_entry_in_range(entry: SpendingEntry, start_date: date, end_date: date) -> bool:
    """Entry recorded on a day in [start_date, end_date)"""
    if entry.created_at is None:
        return False
    return start_date <= entry.created_at.date() < end_date


def filter_entries_in_range(
    entries: Iterable[SpendingEntry], start_date: date, end_date: date
) -> List[SpendingEntry]:
    """Entries in the range, newest first"""
    matching = [e for e in entries if is_entry_in_range(e, start_date, end_date)]
    return sorted(matching, key=lambda e: e.created_at, reverse=True)


def calculate_category_totals(
    categories: Iterable[SpendingCategory],
    entries: Iterable[SpendingEntry],
    start_date: date,
    end_date: date,
) -> List[CategoryTotal]:
    """
    Amount spent per category between start_date (inclusive) and end_date (exclusive).

    Every category is listed, with a zero total when nothing was recorded in
    the range. Categories are ordered newest first.
    """
    totals: Dict[str, Decimal] = {}
    for entry in entries:
        if is_entry_in_range(entry, start_date, end_date):
            totals[entry.category_id] = totals.get(entry.category_id, Decimal("0")) + entry.amount

    ordered = sorted(categories, key=lambda c: c.created_at or datetime.min, reverse=True)
    return [
        CategoryTotal(id=c.id, name=c.name, color=c.color, total_amount=totals.get(c.id, Decimal("0")))
        for c in ordered
    ]
