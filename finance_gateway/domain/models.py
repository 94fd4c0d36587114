"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Priority(str, Enum):
    """Five-level ordinal, most urgent first"""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


class PaymentSessionPhase(str, Enum):
    SELECTION = "selection"
    RUNNER = "runner"
    SUMMARY = "summary"


@dataclass
class Transaction:
    """Income or expense entry owned by a user"""

    id: str
    type: TransactionType
    name: str
    value: Decimal
    currency: str
    due_date: date
    priority: Priority = Priority.MEDIUM
    paid: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    installment_plan_id: Optional[str] = None
    installment_number: Optional[int] = None


@dataclass
class SessionTransaction(Transaction):
    """Transaction with its position in the payment session processing order"""

    order: int = 0


@dataclass(frozen=True)
class BillingPeriod:
    """
    Billing period [start_date, end_date).

    month/year identify the month the period starts in (month is 1-12).
    """

    start_date: date
    end_date: date
    month: int
    year: int


@dataclass
class SessionPeriodGroup:
    """Unpaid expenses belonging to one billing period"""

    label: str
    period: BillingPeriod
    transactions: List[SessionTransaction] = field(default_factory=list)


@dataclass(frozen=True)
class SessionResult:
    paid: Tuple[SessionTransaction, ...] = ()
    skipped: Tuple[SessionTransaction, ...] = ()


@dataclass(frozen=True)
class PaymentSessionState:
    """Snapshot of a guided payment session"""

    phase: PaymentSessionPhase = PaymentSessionPhase.SELECTION
    selected_ids: FrozenSet[str] = frozenset()
    queue: Tuple[SessionTransaction, ...] = ()
    index: int = 0
    results: SessionResult = SessionResult()
    warning_acknowledged: bool = True


@dataclass
class InstallmentBreakdown:
    """Single dated installment in a monthly plan"""

    installment_number: int
    due_date: date
    value: Decimal


@dataclass
class PaidStatusResult:
    """Outcome of persisting a transaction's paid flag"""

    success: bool
    error: Optional[str] = None


@dataclass
class SpendingCategory:
    """User-defined bucket for ad-hoc spending (groceries, fuel, ...)"""

    id: str
    name: str
    color: str
    created_at: Optional[datetime] = None


@dataclass
class SpendingEntry:
    """Single amount recorded against a spending category"""

    id: str
    category_id: str
    amount: Decimal
    note: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class CategoryTotal:
    id: str
    name: str
    color: str
    total_amount: Decimal


@dataclass
class BurndownMonth:
    """Income and expenses due in a month, and expenses actually paid in it"""

    month_start: date
    label: str
    income: Decimal
    expenses: Decimal
    paid: Decimal
