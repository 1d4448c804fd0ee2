from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
import structlog

from ..models.surgery_request_models import SurgeryRequestCreate, SurgeryRequestUpdate, SurgeryRequestResponse
from ..dependencies import get_surgery_request_service
from ...processing.surgery_request_service import SurgeryRequestService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=List[SurgeryRequestResponse])
async def list_surgery_requests(
    patient_id: Optional[str] = Query(None),
    doctor_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: SurgeryRequestService = Depends(get_surgery_request_service),
):
    return await service.list_requests(patient_id=patient_id, doctor_id=doctor_id, limit=limit, offset=offset)


@router.get("/{request_id}", response_model=SurgeryRequestResponse)
async def get_surgery_request(request_id: str, service: SurgeryRequestService = Depends(get_surgery_request_service)):
    return await service.get_request(request_id)


@router.post("/", response_model=SurgeryRequestResponse, status_code=201)
async def create_surgery_request(
    payload: SurgeryRequestCreate,
    service: SurgeryRequestService = Depends(get_surgery_request_service),
):
    logger.info("Received request to create surgery request", patient_id=payload.patient_id, doctor_id=payload.doctor_id)
    return await service.create_request(payload)


@router.put("/{request_id}", response_model=SurgeryRequestResponse)
async def update_surgery_request(
    request_id: str,
    payload: SurgeryRequestUpdate,
    service: SurgeryRequestService = Depends(get_surgery_request_service),
):
    return await service.update_request(request_id, payload)


@router.delete("/{request_id}", status_code=204)
async def delete_surgery_request(request_id: str, service: SurgeryRequestService = Depends(get_surgery_request_service)):
    await service.delete_request(request_id)
    return Response(status_code=204)
