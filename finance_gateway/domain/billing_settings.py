"""Cutoff day setting behind a storage port"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.utils.date_utils import last_day_of_month

MIN_BILLING_DAY = 1
MAX_BILLING_DAY = 31

logger = logging.getLogger(__name__)


class BillingDayStore(ABC):
    """Persistence port for the user's billing cycle cutoff day"""

    @abstractmethod
    def load(self) -> Optional[object]:
        """Return the raw stored value, or None when nothing is stored"""

    @abstractmethod
    def save(self, day: int) -> None:
        """Persist a validated cutoff day"""


class InMemoryBillingDayStore(BillingDayStore):
    def __init__(self, day: Optional[int] = None):
        self._day = day

    def load(self) -> Optional[object]:
        return self._day

    def save(self, day: int) -> None:
        self._day = day


_default_store: BillingDayStore = InMemoryBillingDayStore()


def configure_billing_day_store(store: BillingDayStore) -> None:
    """Replace the store used when callers do not pass one explicitly"""
    global _default_store
    _default_store = store


def _parse_day(raw: object) -> Optional[int]:
    try:
        day = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if day < MIN_BILLING_DAY or day > MAX_BILLING_DAY:
        return None
    return day


def get_billing_period_day(store: Optional[BillingDayStore] = None, today: Optional[date] = None) -> int:
    """
    Configured cutoff day (1-31).

    Missing or corrupt values fall back to the last day of the current month.
    """
    store = store or _default_store
    raw = store.load()
    day = _parse_day(raw) if raw is not None else None
    if day is None:
        today = today or date.today()
        if raw is not None:
            logger.warning("Ignoring invalid stored billing day", extra={"stored_value": str(raw)})
        return last_day_of_month(today.year, today.month)
    return day


def set_billing_period_day(day: int, store: Optional[BillingDayStore] = None) -> None:
    """
    Persist a new cutoff day.

    Raises:
        ValidationError: day outside [1, 31]; the stored value is left unchanged
    """
    if isinstance(day, bool) or not isinstance(day, int) or day < MIN_BILLING_DAY or day > MAX_BILLING_DAY:
        raise ValidationError(f"Billing period day must be between {MIN_BILLING_DAY} and {MAX_BILLING_DAY}")

    store = store or _default_store
    store.save(day)
    logger.info("Billing day updated", extra={"step": "billing_day_updated", "billing_day": day})
