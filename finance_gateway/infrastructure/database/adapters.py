"""Database-backed implementations of the domain ports"""

import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_gateway.domain.billing_settings import BillingDayStore
from finance_gateway.domain.exceptions import TransactionNotFoundError
from finance_gateway.domain.models import PaidStatusResult
from finance_gateway.infrastructure.database.repositories import (
    BILLING_PERIOD_DAY_KEY,
    SettingsRepository,
    TransactionRepository,
)

logger = logging.getLogger(__name__)


class DatabaseBillingDayStore(BillingDayStore):
    """Cutoff day stored in the user_settings table"""

    def __init__(self, db: Session, user_id: str):
        self.repo = SettingsRepository(db, user_id)
        self.db = db

    def load(self) -> Optional[object]:
        return self.repo.get_value(BILLING_PERIOD_DAY_KEY)

    def save(self, day: int) -> None:
        self.repo.set_value(BILLING_PERIOD_DAY_KEY, str(day))
        self.db.commit()


class RepositoryPaidStatusWriter:
    """Persists paid flags for a payment session, one commit per call"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.repo = TransactionRepository(db, user_id)

    async def set_paid_status(self, transaction_id: str, paid: bool) -> PaidStatusResult:
        try:
            self.repo.set_paid_status(transaction_id, paid)
            self.db.commit()
            return PaidStatusResult(success=True)

        except TransactionNotFoundError as e:
            self.db.rollback()
            return PaidStatusResult(success=False, error=str(e))

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating paid status: {e}", extra={"transaction_id": transaction_id})
            return PaidStatusResult(success=False, error="Failed to update transaction")
