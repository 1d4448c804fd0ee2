from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, Response
import structlog

from ..models.user_models import (
    CreateUserRequest,
    CreateUserResponse,
    DoctorListResponse,
    HealthResponse,
    UserProfileResponse,
    UserRole,
)
from ...core.config.settings import get_settings
from ...core.exceptions import CirPlaneError
from ...core.monitoring.audit_logger import AuditLogger
from ..dependencies import get_audit_logger, get_user_provisioning_service
from ...provisioning.user_provisioning_service import UserProvisioningService

logger = structlog.get_logger(__name__)
router = APIRouter()


async def create_user_with_audit(
    request: Request,
    payload: CreateUserRequest,
    service: UserProvisioningService,
    audit_logger: AuditLogger,
    channel: str,
) -> CreateUserResponse:
    """Runs user provisioning and records the attempt in the audit log. Shared by both adapters."""
    action_details = {"email": (payload.email or "").strip(), "role": payload.role, "channel": channel}

    logger.info("Received request to create user", role=payload.role, channel=channel)
    try:
        response = await service.create_user(payload)
    except CirPlaneError as e:
        await audit_logger.log_request(
            request, "CREATE_USER_FAILED", resource="UserProfile", success=False,
            failure_reason=e.message, details=action_details,
        )
        raise

    await audit_logger.log_request(
        request, "CREATE_USER_SUCCESS", user_id=response.user.id, resource="UserProfile",
        resource_id=response.user.id,
        details={**action_details, "password_generated": response.user.password_generated},
    )
    return response


def build_health_response() -> HealthResponse:
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc), service=get_settings().SERVICE_NAME)


@router.post("/admin/create-user", response_model=CreateUserResponse, response_model_exclude_none=True, status_code=201)
async def create_user(
    request: Request,
    payload: CreateUserRequest,
    service: UserProvisioningService = Depends(get_user_provisioning_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    return await create_user_with_audit(request, payload, service, audit_logger, channel="server")


@router.get("/doctors", response_model=DoctorListResponse)
async def list_doctors(service: UserProvisioningService = Depends(get_user_provisioning_service)):
    return await service.list_doctors()


@router.get("/health", response_model=HealthResponse)
async def health():
    return build_health_response()


@router.get("/admin/users", response_model=List[UserProfileResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    service: UserProvisioningService = Depends(get_user_provisioning_service),
):
    return await service.list_profiles(role=role)


@router.delete("/admin/users/{profile_id}", status_code=204)
async def delete_user(
    request: Request,
    profile_id: str,
    service: UserProvisioningService = Depends(get_user_provisioning_service),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    try:
        profile = await service.delete_profile(profile_id)
    except CirPlaneError as e:
        await audit_logger.log_request(
            request, "DELETE_USER_FAILED", resource="UserProfile", resource_id=profile_id,
            success=False, failure_reason=e.message,
        )
        raise
    await audit_logger.log_request(
        request, "DELETE_USER_SUCCESS", user_id=profile.user_id, resource="UserProfile", resource_id=profile_id,
        details={"email": profile.email, "role": profile.role},
    )
    return Response(status_code=204)
