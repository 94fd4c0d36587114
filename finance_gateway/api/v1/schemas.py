"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from finance_gateway.config import settings
from finance_gateway.domain.billing_period import MAX_PERIOD_YEAR, MIN_PERIOD_YEAR
from finance_gateway.domain.models import PaymentSessionPhase, Priority, TransactionType


class BillingDayUpdate(BaseModel):
    """Request body for PUT /v1/settings/billing-day"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    billing_day: int = Field(..., description="Cutoff day of month (1-31)")


class BillingDayResponse(BaseModel):
    user_id: str
    billing_day: int


class BillingPeriodSchema(BaseModel):
    """Billing period [start_date, end_date)"""

    start_date: date
    end_date: date
    month: int
    year: int
    label: str


class BillingPeriodResponse(BaseModel):
    """Response for GET /v1/billing-periods/..."""

    period: BillingPeriodSchema
    previous: BillingPeriodSchema
    next: BillingPeriodSchema
    is_current: bool


class TransactionSchema(BaseModel):
    id: str
    type: TransactionType
    name: str
    value: Decimal
    currency: str
    due_date: date
    priority: Priority
    paid: bool
    installment_plan_id: Optional[str] = None
    installment_number: Optional[int] = None


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    user_id: str = Field(..., min_length=1)
    type: TransactionType
    name: str = Field(..., min_length=1)
    value: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = settings.default_currency
    due_date: date
    priority: Priority = Priority.MEDIUM
    paid: bool = False


class TransactionListResponse(BaseModel):
    user_id: str
    transactions: List[TransactionSchema]


class InstallmentPreviewRequest(BaseModel):
    """Request body for POST /v1/installments/preview"""

    total_value: Decimal = Field(..., gt=0, decimal_places=2)
    start_date: date
    installment_count: int = Field(..., ge=settings.min_installments, le=settings.max_installments)


class InstallmentSchema(BaseModel):
    """Single installment in a monthly plan"""

    installment_number: int
    due_date: date
    value: Decimal


class InstallmentPreviewResponse(BaseModel):
    total_value: Decimal
    installments: List[InstallmentSchema]


class InstallmentPlanRequest(InstallmentPreviewRequest):
    """Request body for POST /v1/installment-plans"""

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: TransactionType = TransactionType.EXPENSE
    currency: str = settings.default_currency
    priority: Priority = Priority.MEDIUM


class InstallmentPlanResponse(BaseModel):
    plan_id: str
    user_id: str
    name: str
    total_value: Decimal
    installment_count: int
    transactions: List[TransactionSchema]


class PaymentPerformanceSchema(BaseModel):
    on_time_rate: float
    average_days_to_payment: int
    current_streak: int


class BillsDueSchema(BaseModel):
    today: List[TransactionSchema]
    tomorrow: List[TransactionSchema]
    this_week: List[TransactionSchema]
    total: Decimal


class ChangeSchema(BaseModel):
    amount: Decimal
    percentage: float


class CashFlowPointSchema(BaseModel):
    date: date
    projected_balance: Decimal


class SpendingCategoryCreateRequest(BaseModel):
    """Request body for POST /v1/spending-categories"""

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1, description="Display color, e.g. #22c55e")


class SpendingCategorySchema(BaseModel):
    id: str
    name: str
    color: str
    created_at: Optional[datetime] = None


class SpendingEntryCreateRequest(BaseModel):
    """Request body for POST /v1/spending-categories/{id}/entries"""

    user_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    note: Optional[str] = None
    created_at: Optional[datetime] = Field(None, description="When the spending happened; defaults to now")


class SpendingEntrySchema(BaseModel):
    id: str
    category_id: str
    amount: Decimal
    note: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryTotalSchema(BaseModel):
    id: str
    name: str
    color: str
    total_amount: Decimal


class CategoryTotalsResponse(BaseModel):
    """Response for GET /v1/spending-categories/totals; range is [start_date, end_date)"""

    start_date: date
    end_date: date
    categories: List[CategoryTotalSchema]


class BurndownMonthSchema(BaseModel):
    month_start: date
    label: str
    income: Decimal
    expenses: Decimal
    paid: Decimal


class DashboardSummaryResponse(BaseModel):
    """Response for GET /v1/dashboard/summary"""

    period: BillingPeriodSchema
    income: Decimal
    expenses: Decimal
    balance: Decimal
    savings_rate: float
    top_expenses: List[TransactionSchema]
    payment_performance: PaymentPerformanceSchema
    bills_due: BillsDueSchema
    income_change: ChangeSchema
    expenses_change: ChangeSchema
    balance_change: ChangeSchema
    cash_flow: List[CashFlowPointSchema]
    burndown: List[BurndownMonthSchema]
    category_totals: List[CategoryTotalSchema]


class PaymentSessionCreateRequest(BaseModel):
    """Request body for POST /v1/payment-sessions; period defaults to the current one"""

    user_id: str = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=MIN_PERIOD_YEAR, le=MAX_PERIOD_YEAR)
    month: Optional[int] = Field(None, ge=1, le=12)

    @model_validator(mode="after")
    def check_year_and_month_together(self):
        if (self.year is None) != (self.month is None):
            raise ValueError("year and month must be given together")
        return self


class ToggleRequest(BaseModel):
    transaction_id: str


class SessionTransactionSchema(TransactionSchema):
    order: int


class SessionGroupSchema(BaseModel):
    label: str
    period: BillingPeriodSchema
    transactions: List[SessionTransactionSchema]


class SessionResultsSchema(BaseModel):
    paid: List[SessionTransactionSchema]
    skipped: List[SessionTransactionSchema]


class PaymentSessionResponse(BaseModel):
    """Snapshot of a payment session"""

    session_id: str
    user_id: str
    phase: PaymentSessionPhase
    reference_period: BillingPeriodSchema
    groups: List[SessionGroupSchema]
    selected_ids: List[str]
    selected_count: int
    selected_total: Decimal
    current_period_income: Decimal
    requires_warning: bool
    warning_acknowledged: bool
    can_continue: bool
    currency: str
    index: int
    total: int
    current_transaction: Optional[SessionTransactionSchema] = None
    results: SessionResultsSchema
    is_processing: bool
    last_error: Optional[str] = None
