"""Installment preview and installment plan endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from finance_gateway.api.v1.presenters import transaction_schema
from finance_gateway.api.v1.schemas import (
    InstallmentPlanRequest,
    InstallmentPlanResponse,
    InstallmentPreviewRequest,
    InstallmentPreviewResponse,
    InstallmentSchema,
)
from finance_gateway.api.dependencies import get_request_id
from finance_gateway.domain.installments import calculate_installments
from finance_gateway.domain.exceptions import ValidationError
from finance_gateway.infrastructure.database.repositories import InstallmentPlanRepository, to_domain
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.observability.metrics import installment_plans_counter

router = APIRouter()


@router.post("/installments/preview", response_model=InstallmentPreviewResponse)
def preview_installments(request_body: InstallmentPreviewRequest):
    """
    Break a total into monthly installments without saving anything.

    Returns:
        Installments whose values sum exactly to total_value
    """
    try:
        installments = calculate_installments(
            request_body.total_value,
            request_body.start_date,
            request_body.installment_count,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return InstallmentPreviewResponse(
        total_value=request_body.total_value,
        installments=[
            InstallmentSchema(
                installment_number=inst.installment_number,
                due_date=inst.due_date,
                value=inst.value,
            )
            for inst in installments
        ],
    )


@router.post("/installment-plans", response_model=InstallmentPlanResponse, status_code=201)
def create_installment_plan(
    request_body: InstallmentPlanRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Create an installment plan with one unpaid transaction per installment.

    Plan and transactions are committed together or not at all.
    """
    request_id = get_request_id(request)
    repo = InstallmentPlanRepository(db, request_body.user_id)

    try:
        plan = repo.create_plan(
            name=request_body.name,
            total_value=request_body.total_value,
            currency=request_body.currency,
            start_date=request_body.start_date,
            priority=request_body.priority,
            installment_count=request_body.installment_count,
            type=request_body.type,
        )
        db.commit()

    except ValidationError as e:
        db.rollback()
        logging.warning(f"Invalid installment plan: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to create installment plan and transactions")

    installments_created = sorted(plan.transactions, key=lambda t: t.installment_number)
    installment_plans_counter.labels(type=request_body.type.value).inc()
    logging.info(
        "Installment plan created",
        extra={"request_id": request_id, "plan_id": plan.id, "installment_count": plan.installment_count},
    )

    return InstallmentPlanResponse(
        plan_id=plan.id,
        user_id=plan.user_id,
        name=plan.name,
        total_value=plan.total_value,
        installment_count=plan.installment_count,
        transactions=[transaction_schema(to_domain(t)) for t in installments_created],
    )


@router.delete("/installment-plans/{plan_id}", status_code=204)
def delete_installment_plan(
    plan_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Delete a plan together with all of its installment transactions"""
    repo = InstallmentPlanRepository(db, user_id)
    if not repo.delete_plan(plan_id):
        raise HTTPException(status_code=404, detail="Installment plan not found")
    db.commit()
    return Response(status_code=204)
