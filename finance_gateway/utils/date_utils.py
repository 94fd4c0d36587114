"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month (month is 1-12)"""
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by offset months, wrapping the year"""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def add_months(from_date: date, months: int) -> date:
    """
    Add calendar months to a date.

    When the target month is shorter than the source day-of-month the result
    is clamped to the last day of the target month (Jan 31 + 1 month -> Feb 28/29)
    instead of rolling into the following month.
    """
    year, month = shift_month(from_date.year, from_date.month, months)
    day = min(from_date.day, last_day_of_month(year, month))
    return date(year, month, day)
