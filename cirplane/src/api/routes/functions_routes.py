from fastapi import APIRouter, Depends, Request

from ..models.user_models import CreateUserRequest, CreateUserResponse, DoctorListResponse, HealthResponse
from ...core.monitoring.audit_logger import AuditLogger
from ..dependencies import get_audit_logger, get_user_provisioning_service
from ...provisioning.user_provisioning_service import UserProvisioningService
from .admin_routes import build_health_response, create_user_with_audit

# Same operations as the server adapter, mounted under FUNCTIONS_PATH for the serverless-style deployment.
router = APIRouter()


@router.post("/create-user", response_model=CreateUserResponse, response_model_exclude_none=True, status_code=201)
async def create_user(
    request: Request,
    payload: CreateUserRequest,
    service: UserProvisioningService = Depends(get_user_provisioning_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    return await create_user_with_audit(request, payload, service, audit_logger, channel="functions")


@router.get("/doctors", response_model=DoctorListResponse)
async def list_doctors(service: UserProvisioningService = Depends(get_user_provisioning_service)):
    return await service.list_doctors()


@router.get("/health", response_model=HealthResponse)
async def health():
    return build_health_response()
