from typing import List, Optional
import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.models.surgery_request_models import SurgeryRequestCreate, SurgeryRequestUpdate
from ..core.database.models.registry_db import AnesthesiaTypeModel, DoctorModel, PatientModel
from ..core.database.models.surgery_db import SurgeryRequestModel
from ..core.exceptions import NotFoundError, ValidationFailure
from .budget_service import BudgetService

logger = structlog.get_logger(__name__)


class SurgeryRequestService:
    def __init__(self, db_session: AsyncSession, budget_service: BudgetService):
        self.db_session = db_session
        self.budget_service = budget_service

    async def list_requests(self, patient_id: Optional[str] = None, doctor_id: Optional[str] = None,
                            limit: int = 100, offset: int = 0) -> List[SurgeryRequestModel]:
        stmt = select(SurgeryRequestModel)
        if patient_id:
            stmt = stmt.where(SurgeryRequestModel.patient_id == patient_id)
        if doctor_id:
            stmt = stmt.where(SurgeryRequestModel.doctor_id == doctor_id)
        stmt = stmt.order_by(SurgeryRequestModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def get_request(self, request_id: str) -> SurgeryRequestModel:
        result = await self.db_session.execute(
            select(SurgeryRequestModel).where(SurgeryRequestModel.id == request_id)
        )
        surgery_request = result.scalars().first()
        if surgery_request is None:
            raise NotFoundError("Pedido de cirurgia não encontrado")
        return surgery_request

    async def create_request(self, data: SurgeryRequestCreate) -> SurgeryRequestModel:
        values = data.model_dump(mode="json")
        await self._check_references(values)
        # Keep the fee as Decimal for the Numeric column
        values["doctor_fee"] = data.doctor_fee

        surgery_request = SurgeryRequestModel(**values)
        self.db_session.add(surgery_request)
        await self._commit()
        await self.db_session.refresh(surgery_request)
        logger.info("Surgery request created", surgery_request_id=surgery_request.id,
                    patient_id=surgery_request.patient_id, doctor_id=surgery_request.doctor_id)
        return surgery_request

    async def update_request(self, request_id: str, data: SurgeryRequestUpdate) -> SurgeryRequestModel:
        """Applies the changes and recomputes the totals of the budgets built on this request."""
        surgery_request = await self.get_request(request_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        for required in ("patient_id", "doctor_id", "doctor_fee"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        await self._check_references(changes)
        if "doctor_fee" in changes:
            changes["doctor_fee"] = data.doctor_fee
        for list_field in ("procedure_ids", "opme_requests", "hospital_equipment", "exams_during_stay"):
            if list_field in changes and changes[list_field] is None:
                changes[list_field] = []

        for field, value in changes.items():
            setattr(surgery_request, field, value)
        await self.budget_service.recalculate_for_request(surgery_request, commit=False)
        await self._commit()
        await self.db_session.refresh(surgery_request)
        logger.info("Surgery request updated", surgery_request_id=request_id, fields=sorted(changes.keys()))
        return surgery_request

    async def delete_request(self, request_id: str) -> None:
        surgery_request = await self.get_request(request_id)
        await self.db_session.delete(surgery_request)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warn("Surgery request delete blocked by budgets", surgery_request_id=request_id, error=str(e))
            raise ValidationFailure("Pedido de cirurgia possui orçamentos e não pode ser excluído")
        logger.info("Surgery request deleted", surgery_request_id=request_id)

    async def _check_references(self, values: dict):
        if values.get("patient_id") and not await self._exists(PatientModel, values["patient_id"]):
            raise ValidationFailure("Paciente não encontrado")
        if values.get("doctor_id") and not await self._exists(DoctorModel, values["doctor_id"]):
            raise ValidationFailure("Médico não encontrado")
        if values.get("anesthesia_id") and not await self._exists(AnesthesiaTypeModel, values["anesthesia_id"]):
            raise ValidationFailure("Tipo de anestesia não encontrado")

    async def _exists(self, model, entity_id: str) -> bool:
        result = await self.db_session.execute(select(model.id).where(model.id == entity_id))
        return result.scalar_one_or_none() is not None

    async def _commit(self):
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warn("Integrity error on surgery request write", error=str(e))
            raise ValidationFailure("Dados do pedido de cirurgia inválidos ou referência inexistente")
