from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
import structlog

from ..models.budget_models import BudgetBreakdownResponse
from ..models.tracking_models import (
    AttachBudgetRequest,
    TrackingResponse,
    UserDecisionRequest,
    UserSurgeryRequestCreate,
    UserSurgeryRequestResponse,
)
from ...core.monitoring.audit_logger import AuditLogger
from ..dependencies import get_approval_workflow_service, get_audit_logger, get_user_request_service
from ...processing.approval_workflow import ApprovalWorkflowService
from ...processing.user_request_service import UserRequestService

logger = structlog.get_logger(__name__)

user_requests_router = APIRouter()
tracking_router = APIRouter()


# --- User surgery requests ---

@user_requests_router.post("/", response_model=UserSurgeryRequestResponse, status_code=201)
async def create_user_surgery_request(
    payload: UserSurgeryRequestCreate,
    service: UserRequestService = Depends(get_user_request_service),
):
    logger.info("Received user surgery request", user_profile_id=payload.user_profile_id,
                urgency_level=payload.urgency_level.value)
    return await service.create_request(payload)


@user_requests_router.get("/", response_model=List[UserSurgeryRequestResponse])
async def list_user_surgery_requests(
    user_profile_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: UserRequestService = Depends(get_user_request_service),
):
    return await service.list_requests(user_profile_id=user_profile_id, limit=limit, offset=offset)


@user_requests_router.get("/{request_id}", response_model=UserSurgeryRequestResponse)
async def get_user_surgery_request(request_id: str, service: UserRequestService = Depends(get_user_request_service)):
    return await service.get_request(request_id)


# --- Budget tracking ---

@tracking_router.get("/", response_model=List[TrackingResponse])
async def list_trackings(
    surgery_request_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: UserRequestService = Depends(get_user_request_service),
):
    return await service.list_trackings(surgery_request_id=surgery_request_id, status=status, limit=limit, offset=offset)


@tracking_router.get("/{tracking_id}", response_model=TrackingResponse)
async def get_tracking(tracking_id: str, workflow: ApprovalWorkflowService = Depends(get_approval_workflow_service)):
    return await workflow.get_tracking(tracking_id)


@tracking_router.get("/{tracking_id}/breakdown", response_model=BudgetBreakdownResponse)
async def get_tracking_breakdown(tracking_id: str, service: UserRequestService = Depends(get_user_request_service)):
    return await service.get_tracking_breakdown(tracking_id)


@tracking_router.post("/{tracking_id}/attach-budget", response_model=TrackingResponse)
async def attach_budget(
    tracking_id: str,
    payload: AttachBudgetRequest,
    workflow: ApprovalWorkflowService = Depends(get_approval_workflow_service),
):
    return await workflow.attach_budget(tracking_id, payload.budget_id)


@tracking_router.post("/{tracking_id}/decision", response_model=TrackingResponse)
async def record_decision(
    request: Request,
    tracking_id: str,
    payload: UserDecisionRequest,
    workflow: ApprovalWorkflowService = Depends(get_approval_workflow_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    tracking = await workflow.record_user_decision(tracking_id, payload.decision, payload.feedback)
    await audit_logger.log_request(
        request, "BUDGET_DECISION_RECORDED", resource="UserBudgetTracking", resource_id=tracking_id,
        details={"decision": tracking.user_approval, "budget_id": tracking.budget_id},
    )
    return tracking
