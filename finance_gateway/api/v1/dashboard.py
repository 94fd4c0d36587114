"""GET /v1/dashboard/summary - period totals, savings rate, forecasts and spending"""

from dataclasses import asdict
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finance_gateway.api.v1.presenters import period_schema, transaction_schema
from finance_gateway.api.v1.schemas import (
    BillsDueSchema,
    BurndownMonthSchema,
    CashFlowPointSchema,
    CategoryTotalSchema,
    ChangeSchema,
    DashboardSummaryResponse,
    PaymentPerformanceSchema,
)
from finance_gateway.api.dependencies import resolve_billing_day
from finance_gateway.config import settings
from finance_gateway.domain.billing_period import (
    MAX_PERIOD_YEAR,
    MIN_PERIOD_YEAR,
    get_billing_period,
    get_current_billing_period,
    get_previous_billing_period,
)
from finance_gateway.domain.dashboard import (
    calculate_payment_burndown,
    calculate_payment_performance,
    calculate_savings_rate,
    compare_periods,
    get_bills_due_this_week,
    get_top_expenses,
    project_cash_flow,
)
from finance_gateway.domain.spending import calculate_category_totals
from finance_gateway.infrastructure.database.repositories import SpendingRepository, TransactionRepository
from finance_gateway.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/dashboard/summary", response_model=DashboardSummaryResponse)
def get_dashboard_summary(
    user_id: str = Query(..., description="User identifier"),
    year: Optional[int] = Query(None, ge=MIN_PERIOD_YEAR, le=MAX_PERIOD_YEAR),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_balance: Decimal = Query(Decimal("0"), description="Balance the cash flow projection starts from"),
    db: Session = Depends(get_db),
):
    """
    Dashboard figures for one billing period (current period by default).

    Comparison is against the immediately preceding period.
    """
    if (year is None) != (month is None):
        raise HTTPException(status_code=422, detail="year and month must be given together")

    cutoff_day = resolve_billing_day(db, user_id)
    if year is not None and month is not None:
        period = get_billing_period(year, month, cutoff_day)
    else:
        period = get_current_billing_period(cutoff_day=cutoff_day)

    transactions = TransactionRepository(db, user_id).list_transactions()
    comparison = compare_periods(transactions, period, get_previous_billing_period(period, cutoff_day))
    performance = calculate_payment_performance(transactions)
    bills = get_bills_due_this_week(transactions)
    cash_flow = project_cash_flow(transactions, current_balance, settings.cash_flow_days)
    burndown = calculate_payment_burndown(transactions, settings.burndown_months)

    spending = SpendingRepository(db, user_id)
    category_totals = calculate_category_totals(
        spending.list_categories(), spending.list_entries(), period.start_date, period.end_date
    )

    return DashboardSummaryResponse(
        period=period_schema(period),
        income=comparison.current.income,
        expenses=comparison.current.expenses,
        balance=comparison.current.balance,
        savings_rate=calculate_savings_rate(comparison.current.income, comparison.current.expenses),
        top_expenses=[
            transaction_schema(t) for t in get_top_expenses(transactions, period, settings.top_expenses_limit)
        ],
        payment_performance=PaymentPerformanceSchema(
            on_time_rate=performance.on_time_rate,
            average_days_to_payment=performance.average_days_to_payment,
            current_streak=performance.current_streak,
        ),
        bills_due=BillsDueSchema(
            today=[transaction_schema(t) for t in bills.today],
            tomorrow=[transaction_schema(t) for t in bills.tomorrow],
            this_week=[transaction_schema(t) for t in bills.this_week],
            total=bills.total,
        ),
        income_change=ChangeSchema(**vars(comparison.income_change)),
        expenses_change=ChangeSchema(**vars(comparison.expenses_change)),
        balance_change=ChangeSchema(**vars(comparison.balance_change)),
        cash_flow=[
            CashFlowPointSchema(date=point.date, projected_balance=point.projected_balance)
            for point in cash_flow
        ],
        burndown=[BurndownMonthSchema(**asdict(month)) for month in burndown],
        category_totals=[CategoryTotalSchema(**asdict(total)) for total in category_totals],
    )
