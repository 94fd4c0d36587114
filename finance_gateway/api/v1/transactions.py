"""GET/POST /v1/transactions - a user's income and expenses"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finance_gateway.api.v1.presenters import transaction_schema
from finance_gateway.api.v1.schemas import TransactionCreateRequest, TransactionListResponse, TransactionSchema
from finance_gateway.domain.transactions import sort_transactions
from finance_gateway.infrastructure.database.repositories import TransactionRepository
from finance_gateway.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Transactions ordered unpaid first, then by priority, newest first"""
    transactions = sort_transactions(TransactionRepository(db, user_id).list_transactions())
    return TransactionListResponse(
        user_id=user_id,
        transactions=[transaction_schema(t) for t in transactions],
    )


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(request_body: TransactionCreateRequest, db: Session = Depends(get_db)):
    repo = TransactionRepository(db, request_body.user_id)
    transaction = repo.create(
        type=request_body.type,
        name=request_body.name,
        value=request_body.value,
        currency=request_body.currency,
        due_date=request_body.due_date,
        priority=request_body.priority,
        paid=request_body.paid,
    )
    db.commit()
    return transaction_schema(transaction)
