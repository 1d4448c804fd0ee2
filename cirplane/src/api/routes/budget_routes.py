from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
import structlog

from ..models.budget_models import (
    BudgetBreakdownResponse,
    BudgetCreate,
    BudgetResponse,
    BudgetStatus,
    BudgetUpdate,
)
from ..dependencies import get_budget_service
from ...processing.budget_service import BudgetService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=List[BudgetResponse])
async def list_budgets(
    status: Optional[BudgetStatus] = Query(None),
    surgery_request_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: BudgetService = Depends(get_budget_service),
):
    return await service.list_budgets(status=status, surgery_request_id=surgery_request_id, limit=limit, offset=offset)


@router.get("/{budget_id}", response_model=BudgetResponse)
async def get_budget(budget_id: str, service: BudgetService = Depends(get_budget_service)):
    return await service.get_budget(budget_id)


@router.get("/{budget_id}/breakdown", response_model=BudgetBreakdownResponse)
async def get_budget_breakdown(budget_id: str, service: BudgetService = Depends(get_budget_service)):
    return await service.get_breakdown(budget_id)


@router.post("/", response_model=BudgetResponse, status_code=201)
async def create_budget(payload: BudgetCreate, service: BudgetService = Depends(get_budget_service)):
    logger.info("Received request to create budget", surgery_request_id=payload.surgery_request_id,
                hospital_id=payload.hospital_id)
    return await service.create_budget(payload)


@router.put("/{budget_id}", response_model=BudgetResponse)
async def update_budget(budget_id: str, payload: BudgetUpdate, service: BudgetService = Depends(get_budget_service)):
    return await service.update_budget(budget_id, payload)


@router.delete("/{budget_id}", status_code=204)
async def delete_budget(budget_id: str, service: BudgetService = Depends(get_budget_service)):
    await service.delete_budget(budget_id)
    return Response(status_code=204)
