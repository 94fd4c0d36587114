"""Data access layer for transactions, installment plans, spending categories and user settings"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from finance_gateway.infrastructure.database.models import (
    InstallmentPlanRecord,
    SpendingCategoryRecord,
    SpendingEntryRecord,
    TransactionRecord,
    UserSetting,
)
from finance_gateway.domain.exceptions import CategoryNotFoundError, TransactionNotFoundError
from finance_gateway.domain.installments import build_installment_transactions
from finance_gateway.domain.models import Priority, SpendingCategory, SpendingEntry, Transaction, TransactionType

BILLING_PERIOD_DAY_KEY = "billing_period_day"


def to_domain(record: TransactionRecord) -> Transaction:
    """Map an ORM row to the domain Transaction"""
    return Transaction(
        id=record.id,
        type=TransactionType(record.type),
        name=record.name,
        value=Decimal(record.value),
        currency=record.currency,
        due_date=record.due_date,
        priority=Priority(record.priority),
        paid=record.paid,
        created_at=record.created_at,
        updated_at=record.updated_at,
        installment_plan_id=record.installment_plan_id,
        installment_number=record.installment_number,
    )


class TransactionRepository:
    """Repository for a user's transactions"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def list_transactions(self) -> List[Transaction]:
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == self.user_id)
            .all()
        )
        return [to_domain(r) for r in records]

    def get(self, transaction_id: str) -> TransactionRecord:
        record = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.id == transaction_id, TransactionRecord.user_id == self.user_id)
            .first()
        )
        if record is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        return record

    def create(
        self,
        type: TransactionType,
        name: str,
        value: Decimal,
        currency: str,
        due_date: date,
        priority: Priority,
        paid: bool = False,
    ) -> Transaction:
        record = TransactionRecord(
            user_id=self.user_id,
            type=type,
            name=name,
            value=value,
            currency=currency,
            due_date=due_date,
            priority=priority,
            paid=paid,
        )
        self.db.add(record)
        self.db.flush()
        self.db.refresh(record)
        return to_domain(record)

    def set_paid_status(self, transaction_id: str, paid: bool) -> Transaction:
        """Update the paid flag; caller commits"""
        record = self.get(transaction_id)
        record.paid = paid
        record.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return to_domain(record)


class InstallmentPlanRepository:
    """Repository for installment plans and their installment transactions"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def create_plan(
        self,
        name: str,
        total_value: Decimal,
        currency: str,
        start_date: date,
        priority: Priority,
        installment_count: int,
        type: TransactionType,
    ) -> InstallmentPlanRecord:
        """Create the plan and one unpaid transaction per installment in one unit of work"""
        db_plan = InstallmentPlanRecord(
            user_id=self.user_id,
            name=name,
            total_value=total_value,
            currency=currency,
            start_date=start_date,
            priority=priority,
            installment_count=installment_count,
        )
        self.db.add(db_plan)
        self.db.flush()

        installments = build_installment_transactions(
            name,
            total_value,
            start_date,
            installment_count,
            type=type,
            currency=currency,
            priority=priority,
            installment_plan_id=db_plan.id,
        )
        for inst in installments:
            self.db.add(
                TransactionRecord(
                    id=inst.id,
                    user_id=self.user_id,
                    type=inst.type,
                    name=inst.name,
                    value=inst.value,
                    currency=inst.currency,
                    due_date=inst.due_date,
                    priority=inst.priority,
                    paid=inst.paid,
                    installment_plan_id=inst.installment_plan_id,
                    installment_number=inst.installment_number,
                )
            )
        self.db.flush()

        return db_plan

    def get_plan(self, plan_id: str) -> Optional[InstallmentPlanRecord]:
        return (
            self.db.query(InstallmentPlanRecord)
            .filter(InstallmentPlanRecord.id == plan_id, InstallmentPlanRecord.user_id == self.user_id)
            .first()
        )

    def delete_plan(self, plan_id: str) -> bool:
        """Delete the plan; its installment transactions go with it"""
        plan = self.get_plan(plan_id)
        if plan is None:
            return False
        self.db.delete(plan)
        self.db.flush()
        return True


class SettingsRepository:
    """Per-user key/value settings"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _get_record(self, key: str) -> Optional[UserSetting]:
        return (
            self.db.query(UserSetting)
            .filter(UserSetting.user_id == self.user_id, UserSetting.key == key)
            .first()
        )

    def get_value(self, key: str) -> Optional[str]:
        record = self._get_record(key)
        return record.value if record else None

    def set_value(self, key: str, value: str) -> None:
        record = self._get_record(key)
        if record is None:
            self.db.add(UserSetting(user_id=self.user_id, key=key, value=value))
        else:
            record.value = value
        self.db.flush()


def category_to_domain(record: SpendingCategoryRecord) -> SpendingCategory:
    return SpendingCategory(id=record.id, name=record.name, color=record.color, created_at=record.created_at)


def entry_to_domain(record: SpendingEntryRecord) -> SpendingEntry:
    return SpendingEntry(
        id=record.id,
        category_id=record.category_id,
        amount=Decimal(record.amount),
        note=record.note,
        created_at=record.created_at,
    )


class SpendingRepository:
    """Repository for a user's spending categories and their entries"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def list_categories(self) -> List[SpendingCategory]:
        records = (
            self.db.query(SpendingCategoryRecord)
            .filter(SpendingCategoryRecord.user_id == self.user_id)
            .order_by(SpendingCategoryRecord.created_at.desc())
            .all()
        )
        return [category_to_domain(r) for r in records]

    def get_category(self, category_id: str) -> SpendingCategoryRecord:
        record = (
            self.db.query(SpendingCategoryRecord)
            .filter(SpendingCategoryRecord.id == category_id, SpendingCategoryRecord.user_id == self.user_id)
            .first()
        )
        if record is None:
            raise CategoryNotFoundError(f"Spending category {category_id} not found")
        return record

    def create_category(self, name: str, color: str) -> SpendingCategory:
        record = SpendingCategoryRecord(user_id=self.user_id, name=name, color=color)
        self.db.add(record)
        self.db.flush()
        self.db.refresh(record)
        return category_to_domain(record)

    def delete_category(self, category_id: str) -> None:
        """Delete the category; its entries go with it"""
        self.db.delete(self.get_category(category_id))
        self.db.flush()

    def add_entry(
        self,
        category_id: str,
        amount: Decimal,
        note: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> SpendingEntry:
        self.get_category(category_id)
        record = SpendingEntryRecord(category_id=category_id, amount=amount, note=note)
        if created_at is not None:
            record.created_at = created_at
        self.db.add(record)
        self.db.flush()
        self.db.refresh(record)
        return entry_to_domain(record)

    def list_entries(self, category_id: Optional[str] = None) -> List[SpendingEntry]:
        """Entries of one category, or of all the user's categories"""
        query = self.db.query(SpendingEntryRecord).join(SpendingCategoryRecord).filter(
            SpendingCategoryRecord.user_id == self.user_id
        )
        if category_id is not None:
            self.get_category(category_id)
            query = query.filter(SpendingEntryRecord.category_id == category_id)
        records = query.order_by(SpendingEntryRecord.created_at.desc()).all()
        return [entry_to_domain(r) for r in records]

    def delete_entry(self, entry_id: str) -> None:
        record = (
            self.db.query(SpendingEntryRecord)
            .join(SpendingCategoryRecord)
            .filter(SpendingEntryRecord.id == entry_id, SpendingCategoryRecord.user_id == self.user_id)
            .first()
        )
        if record is None:
            raise CategoryNotFoundError(f"Spending entry {entry_id} not found")
        self.db.delete(record)
        self.db.flush()
