from typing import List, Optional, Type
from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..models.registry_models import (
    PatientCreate, PatientUpdate, PatientResponse,
    DoctorCreate, DoctorUpdate, DoctorResponse,
    HospitalCreate, HospitalUpdate, HospitalResponse,
    SupplierCreate, SupplierUpdate, SupplierResponse,
    OPMECreate, OPMEUpdate, OPMEResponse,
    ProcedureCreate, ProcedureUpdate, ProcedureResponse,
    AnesthesiaTypeCreate, AnesthesiaTypeUpdate, AnesthesiaTypeResponse,
)
from ...core.database.db_session import get_db_session
from ...processing.registry_service import (
    RegistryEntity, RegistryService,
    PATIENTS, DOCTORS, HOSPITALS, SUPPLIERS, OPMES, PROCEDURES, ANESTHESIA_TYPES,
)

logger = structlog.get_logger(__name__)


def build_crud_router(
    entity: RegistryEntity,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    response_model: Type[BaseModel],
) -> APIRouter:
    """Builds list/get/create/update/delete endpoints for one registry table."""
    router = APIRouter()

    def get_service(db: AsyncSession = Depends(get_db_session)) -> RegistryService:
        return RegistryService(db, entity)

    @router.get("/", response_model=List[response_model])
    async def list_entries(
        search: Optional[str] = Query(None, description="Case-insensitive match on the searchable fields"),
        limit: int = Query(100, ge=1, le=500),
        offset: int = Query(0, ge=0),
        service: RegistryService = Depends(get_service),
    ):
        return await service.list(search=search, limit=limit, offset=offset)

    @router.get("/{entry_id}", response_model=response_model)
    async def get_entry(entry_id: str, service: RegistryService = Depends(get_service)):
        return await service.get(entry_id)

    @router.post("/", response_model=response_model, status_code=201)
    async def create_entry(payload: create_model, service: RegistryService = Depends(get_service)):
        logger.info("Received request to create registry entry", entity=entity.name)
        return await service.create(payload.model_dump())

    @router.put("/{entry_id}", response_model=response_model)
    async def update_entry(entry_id: str, payload: update_model, service: RegistryService = Depends(get_service)):
        return await service.update(entry_id, payload.model_dump(exclude_unset=True))

    @router.delete("/{entry_id}", status_code=204)
    async def delete_entry(entry_id: str, service: RegistryService = Depends(get_service)):
        await service.delete(entry_id)
        return Response(status_code=204)

    return router


patients_router = build_crud_router(PATIENTS, PatientCreate, PatientUpdate, PatientResponse)
doctors_router = build_crud_router(DOCTORS, DoctorCreate, DoctorUpdate, DoctorResponse)
hospitals_router = build_crud_router(HOSPITALS, HospitalCreate, HospitalUpdate, HospitalResponse)
suppliers_router = build_crud_router(SUPPLIERS, SupplierCreate, SupplierUpdate, SupplierResponse)
opmes_router = build_crud_router(OPMES, OPMECreate, OPMEUpdate, OPMEResponse)
procedures_router = build_crud_router(PROCEDURES, ProcedureCreate, ProcedureUpdate, ProcedureResponse)
anesthesia_types_router = build_crud_router(ANESTHESIA_TYPES, AnesthesiaTypeCreate, AnesthesiaTypeUpdate, AnesthesiaTypeResponse)
