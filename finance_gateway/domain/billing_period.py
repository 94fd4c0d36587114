"""Billing period calendar arithmetic driven by the cutoff day"""

from datetime import date
from typing import Optional

from finance_gateway.domain.billing_settings import get_billing_period_day
from finance_gateway.domain.models import BillingPeriod
from finance_gateway.utils.date_utils import last_day_of_month, shift_month

# Years whose period and both neighbours stay inside the date range
MIN_PERIOD_YEAR = 2
MAX_PERIOD_YEAR = 9998


def actual_day_for_month(day: int, year: int, month: int) -> int:
    """Cutoff day clamped to the length of the month (31 in February -> 28/29)"""
    return min(day, last_day_of_month(year, month))


def get_billing_period(year: int, month: int, cutoff_day: Optional[int] = None) -> BillingPeriod:
    """
    Billing period starting in (year, month).

    The period starts on the cutoff day of that month and ends (exclusive) on
    the cutoff day of the following month, each clamped to the month length.
    When cutoff_day is omitted the configured billing day is used.
    """
    day = cutoff_day if cutoff_day is not None else get_billing_period_day()

    start_date = date(year, month, actual_day_for_month(day, year, month))

    next_year, next_month = shift_month(year, month, 1)
    end_date = date(next_year, next_month, actual_day_for_month(day, next_year, next_month))

    return BillingPeriod(start_date=start_date, end_date=end_date, month=month, year=year)


def get_current_billing_period(today: Optional[date] = None, cutoff_day: Optional[int] = None) -> BillingPeriod:
    """Billing period whose [start, end) interval contains today"""
    today = today or date.today()
    day = cutoff_day if cutoff_day is not None else get_billing_period_day(today=today)

    # Before this month's cutoff the current period started last month
    if today.day < actual_day_for_month(day, today.year, today.month):
        year, month = shift_month(today.year, today.month, -1)
        return get_billing_period(year, month, day)

    return get_billing_period(today.year, today.month, day)


def get_next_billing_period(period: BillingPeriod, cutoff_day: Optional[int] = None) -> BillingPeriod:
    year, month = shift_month(period.year, period.month, 1)
    return get_billing_period(year, month, cutoff_day)


def get_previous_billing_period(period: BillingPeriod, cutoff_day: Optional[int] = None) -> BillingPeriod:
    year, month = shift_month(period.year, period.month, -1)
    return get_billing_period(year, month, cutoff_day)


def is_date_in_billing_period(value: date, period: BillingPeriod) -> bool:
    """Half-open interval test: start inclusive, end exclusive"""
    return period.start_date <= value < period.end_date


def is_same_billing_period(period: BillingPeriod, other: BillingPeriod) -> bool:
    """Identity on (month, year, start_date)"""
    return (
        period.month == other.month
        and period.year == other.year
        and period.start_date == other.start_date
    )


def is_current_billing_period(
    period: BillingPeriod,
    today: Optional[date] = None,
    cutoff_day: Optional[int] = None,
) -> bool:
    return is_same_billing_period(period, get_current_billing_period(today, cutoff_day))


def format_billing_period(period: BillingPeriod) -> str:
    """Readable range, e.g. "Jan 10 - Feb 10, 2025" (year taken from the end date)"""
    start, end = period.start_date, period.end_date
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"
