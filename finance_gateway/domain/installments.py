"""Monthly installment plan generation"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import uuid

from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.domain.models import InstallmentBreakdown, Priority, Transaction, TransactionType
from finance_gateway.utils.date_utils import add_months

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce to Decimal rounded half-up to cents"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_installments(
    total_value: Decimal,
    start_date: date,
    installment_count: int,
) -> List[InstallmentBreakdown]:
    """
    Split total_value into monthly installments starting at start_date.

    Requirements:
    - Per-installment value is total / count rounded to cents
    - Last installment absorbs the rounding remainder so the plan sums exactly to total
    - Installment i is due start_date + i months, clamped to the last day of
      short target months (Jan 31 -> Feb 28 -> Mar 31)

    Example:
        100.00 / 3 → [33.33, 33.33, 33.34]
        per installment 33.33, remainder 100.00 - 99.99 = 0.01
    """
    if installment_count < 1:
        raise ValidationError("Installment count must be at least 1")

    total = to_money(total_value)
    if total <= 0:
        raise ValidationError("Total value must be positive")

    per_installment = (total / installment_count).quantize(CENT, rounding=ROUND_HALF_UP)
    remainder = total - per_installment * installment_count

    installments = []
    for i in range(installment_count):
        # Last installment absorbs remainder to ensure exact total
        value = per_installment + (remainder if i == installment_count - 1 else Decimal("0"))

        installments.append(
            InstallmentBreakdown(
                installment_number=i + 1,
                due_date=add_months(start_date, i),
                value=value,
            )
        )

    return installments


def build_installment_transactions(
    name: str,
    total_value: Decimal,
    start_date: date,
    installment_count: int,
    type: TransactionType = TransactionType.EXPENSE,
    currency: str = "USD",
    priority: Priority = Priority.MEDIUM,
    installment_plan_id: Optional[str] = None,
) -> List[Transaction]:
    """Expand a plan into unpaid transactions named "{name} ({i}/{count})" """
    plan_id = installment_plan_id or str(uuid.uuid4())
    return [
        Transaction(
            id=str(uuid.uuid4()),
            type=type,
            name=f"{name} ({inst.installment_number}/{installment_count})",
            value=inst.value,
            currency=currency,
            due_date=inst.due_date,
            priority=priority,
            paid=False,
            installment_plan_id=plan_id,
            installment_number=inst.installment_number,
        )
        for inst in calculate_installments(total_value, start_date, installment_count)
    ]
