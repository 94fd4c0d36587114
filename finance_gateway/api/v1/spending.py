"""Spending categories: ad-hoc spending recorded outside scheduled transactions"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import (
    CategoryTotalSchema,
    CategoryTotalsResponse,
    SpendingCategoryCreateRequest,
    SpendingCategorySchema,
    SpendingEntryCreateRequest,
    SpendingEntrySchema,
)
from finance_gateway.api.dependencies import get_request_id
from finance_gateway.domain.spending import calculate_category_totals, filter_entries_in_range
from finance_gateway.infrastructure.database.repositories import SpendingRepository
from finance_gateway.infrastructure.database.session import get_db

router = APIRouter()


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=422, detail="start_date and end_date must be given together")
    if start_date is not None and end_date <= start_date:
        raise HTTPException(status_code=422, detail="end_date must be after start_date")


@router.get("/spending-categories", response_model=List[SpendingCategorySchema])
def list_categories(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    return [SpendingCategorySchema(**asdict(c)) for c in SpendingRepository(db, user_id).list_categories()]


@router.post("/spending-categories", response_model=SpendingCategorySchema, status_code=201)
def create_category(
    request_body: SpendingCategoryCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    category = SpendingRepository(db, request_body.user_id).create_category(request_body.name, request_body.color)
    db.commit()
    logging.info(
        "Spending category created",
        extra={"request_id": get_request_id(request), "category_id": category.id},
    )
    return SpendingCategorySchema(**asdict(category))


@router.get("/spending-categories/totals", response_model=CategoryTotalsResponse)
def get_category_totals(
    user_id: str = Query(..., description="User identifier"),
    start_date: date = Query(..., description="First day of the range"),
    end_date: date = Query(..., description="Day after the range"),
    db: Session = Depends(get_db),
):
    """Amount spent per category in [start_date, end_date); categories without spending report 0"""
    _check_range(start_date, end_date)
    repo = SpendingRepository(db, user_id)
    totals = calculate_category_totals(repo.list_categories(), repo.list_entries(), start_date, end_date)
    return CategoryTotalsResponse(
        start_date=start_date,
        end_date=end_date,
        categories=[CategoryTotalSchema(**asdict(t)) for t in totals],
    )


@router.delete("/spending-categories/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Delete a category together with its entries"""
    SpendingRepository(db, user_id).delete_category(category_id)
    db.commit()
    return Response(status_code=204)


@router.post("/spending-categories/{category_id}/entries", response_model=SpendingEntrySchema, status_code=201)
def add_entry(
    category_id: str,
    request_body: SpendingEntryCreateRequest,
    db: Session = Depends(get_db),
):
    entry = SpendingRepository(db, request_body.user_id).add_entry(
        category_id,
        request_body.amount,
        note=request_body.note,
        created_at=request_body.created_at,
    )
    db.commit()
    return SpendingEntrySchema(**asdict(entry))


@router.get("/spending-categories/{category_id}/entries", response_model=List[SpendingEntrySchema])
def list_entries(
    category_id: str,
    user_id: str = Query(..., description="User identifier"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """Entries of a category, newest first, optionally limited to [start_date, end_date)"""
    _check_range(start_date, end_date)
    entries = SpendingRepository(db, user_id).list_entries(category_id)
    if start_date is not None:
        entries = filter_entries_in_range(entries, start_date, end_date)
    return [SpendingEntrySchema(**asdict(e)) for e in entries]


@router.delete("/spending-entries/{entry_id}", status_code=204)
def delete_entry(
    entry_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    SpendingRepository(db, user_id).delete_entry(entry_id)
    db.commit()
    return Response(status_code=204)
