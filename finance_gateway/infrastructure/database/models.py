"""SQLAlchemy ORM models for transactions, installment plans and user settings"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, ForeignKey, Numeric, Text, Enum, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from finance_gateway.domain.models import Priority, TransactionType

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class InstallmentPlanRecord(Base):
    """Single logical income/expense split into monthly installments"""

    __tablename__ = "installment_plans"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    total_value = Column(Numeric(19, 2), nullable=False)
    currency = Column(Text, nullable=False, default="USD")
    start_date = Column(Date, nullable=False)
    priority = Column(Enum(Priority, native_enum=False), nullable=False)
    installment_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("TransactionRecord", back_populates="plan", cascade="all, delete-orphan")


class TransactionRecord(Base):
    """Income or expense owned by a user"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Enum(TransactionType, native_enum=False), nullable=False)
    name = Column(Text, nullable=False)
    value = Column(Numeric(19, 2), nullable=False)
    currency = Column(Text, nullable=False, default="USD")
    due_date = Column(Date, nullable=False)
    priority = Column(Enum(Priority, native_enum=False), nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    installment_plan_id = Column(String(36), ForeignKey("installment_plans.id", ondelete="CASCADE"), nullable=True, index=True)
    installment_number = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    plan = relationship("InstallmentPlanRecord", back_populates="transactions")


class UserSetting(Base):
    """Per-user key/value setting (billing cycle cutoff day)"""

    __tablename__ = "user_settings"
    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_user_settings_user_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False, index=True)
    key = Column(Text, nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class SpendingCategoryRecord(Base):
    """User-defined spending category"""

    __tablename__ = "spending_categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    color = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    entries = relationship("SpendingEntryRecord", back_populates="category", cascade="all, delete-orphan")


class SpendingEntryRecord(Base):
    """Amount recorded against a spending category"""

    __tablename__ = "spending_category_entries"

    id = Column(String(36), primary_key=True, default=_new_id)
    category_id = Column(
        String(36), ForeignKey("spending_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(19, 2), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("SpendingCategoryRecord", back_populates="entries")
