from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type
import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database.db_session import Base
from ..core.database.models.registry_db import (
    PatientModel,
    DoctorModel,
    HospitalModel,
    SupplierModel,
    OPMEModel,
    ProcedureModel,
    AnesthesiaTypeModel,
)
from ..core.exceptions import NotFoundError, ValidationFailure

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RegistryEntity:
    """Describes one registry table: how it is searched, ordered and named in messages."""
    name: str
    model: Type[Base]
    search_fields: Sequence[str]
    order_by: str
    not_found_message: str


PATIENTS = RegistryEntity("patients", PatientModel, ("name", "cpf", "contact"), "name", "Paciente não encontrado")
DOCTORS = RegistryEntity("doctors", DoctorModel, ("name", "crm", "cpf", "specialty"), "name", "Médico não encontrado")
HOSPITALS = RegistryEntity("hospitals", HospitalModel, ("name", "address"), "name", "Hospital não encontrado")
SUPPLIERS = RegistryEntity("suppliers", SupplierModel, ("name", "cnpj", "contact"), "name", "Fornecedor não encontrado")
OPMES = RegistryEntity("opmes", OPMEModel, ("name", "brand"), "name", "OPME não encontrado")
PROCEDURES = RegistryEntity("procedures", ProcedureModel, ("name",), "name", "Procedimento não encontrado")
ANESTHESIA_TYPES = RegistryEntity("anesthesia_types", AnesthesiaTypeModel, ("type",), "type", "Tipo de anestesia não encontrado")


class RegistryService:
    """CRUD over a single registry table."""

    def __init__(self, db_session: AsyncSession, entity: RegistryEntity):
        self.db_session = db_session
        self.entity = entity

    async def list(self, search: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[Any]:
        model = self.entity.model
        stmt = select(model)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(*[getattr(model, field).ilike(pattern) for field in self.entity.search_fields]))
        stmt = stmt.order_by(getattr(model, self.entity.order_by)).offset(offset).limit(limit)
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, entity_id: str) -> Any:
        model = self.entity.model
        result = await self.db_session.execute(select(model).where(model.id == entity_id))
        instance = result.scalars().first()
        if instance is None:
            raise NotFoundError(self.entity.not_found_message)
        return instance

    async def exists(self, entity_id: Optional[str]) -> bool:
        if not entity_id:
            return False
        model = self.entity.model
        result = await self.db_session.execute(select(model.id).where(model.id == entity_id))
        return result.scalar_one_or_none() is not None

    async def create(self, data: Dict[str, Any]) -> Any:
        instance = self.entity.model(**data)
        self.db_session.add(instance)
        await self._commit("create")
        await self.db_session.refresh(instance)
        logger.info("Registry entry created", entity=self.entity.name, entity_id=instance.id)
        return instance

    async def update(self, entity_id: str, data: Dict[str, Any]) -> Any:
        instance = await self.get(entity_id)
        for field, value in data.items():
            setattr(instance, field, value)
        await self._commit("update")
        await self.db_session.refresh(instance)
        logger.info("Registry entry updated", entity=self.entity.name, entity_id=entity_id, fields=sorted(data.keys()))
        return instance

    async def delete(self, entity_id: str) -> None:
        instance = await self.get(entity_id)
        await self.db_session.delete(instance)
        await self._commit("delete")
        logger.info("Registry entry deleted", entity=self.entity.name, entity_id=entity_id)

    async def _commit(self, operation: str):
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warn("Integrity error on registry write", entity=self.entity.name, operation=operation, error=str(e))
            if operation == "delete":
                raise ValidationFailure("Registro em uso por outros cadastros e não pode ser excluído")
            raise ValidationFailure("Dados inválidos ou referência inexistente")
