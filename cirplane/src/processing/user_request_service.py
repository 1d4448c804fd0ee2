from typing import List, Optional
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.models.budget_models import BudgetBreakdownResponse
from ..api.models.tracking_models import UserSurgeryRequestCreate
from ..core.database.models.user_db import (
    UserBudgetTrackingModel,
    UserProfileModel,
    UserSurgeryRequestModel,
)
from ..core.exceptions import NotFoundError, ValidationFailure
from .approval_workflow import ApprovalWorkflowService
from .budget_service import BudgetService

logger = structlog.get_logger(__name__)


class UserRequestService:
    """
    Surgery requests submitted by doctors and secretaries, and the budget
    tracking records that follow them.
    """

    def __init__(self, db_session: AsyncSession, workflow: ApprovalWorkflowService, budget_service: BudgetService):
        self.db_session = db_session
        self.workflow = workflow
        self.budget_service = budget_service

    async def create_request(self, data: UserSurgeryRequestCreate) -> UserSurgeryRequestModel:
        """Stores the request and opens its tracking record in the same transaction."""
        profile = (await self.db_session.execute(
            select(UserProfileModel.id).where(UserProfileModel.id == data.user_profile_id)
        )).scalar_one_or_none()
        if profile is None:
            raise ValidationFailure("Perfil de usuário não encontrado")

        values = data.model_dump()
        values["urgency_level"] = data.urgency_level.value
        user_request = UserSurgeryRequestModel(**values)
        self.db_session.add(user_request)
        await self.db_session.flush()

        await self.workflow.create_tracking(user_request.id, commit=False)
        await self.db_session.commit()
        await self.db_session.refresh(user_request)
        logger.info("User surgery request created", request_id=user_request.id, user_profile_id=data.user_profile_id)
        return user_request

    async def list_requests(self, user_profile_id: Optional[str] = None,
                            limit: int = 100, offset: int = 0) -> List[UserSurgeryRequestModel]:
        stmt = select(UserSurgeryRequestModel)
        if user_profile_id:
            stmt = stmt.where(UserSurgeryRequestModel.user_profile_id == user_profile_id)
        stmt = stmt.order_by(UserSurgeryRequestModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def get_request(self, request_id: str) -> UserSurgeryRequestModel:
        result = await self.db_session.execute(
            select(UserSurgeryRequestModel).where(UserSurgeryRequestModel.id == request_id)
        )
        user_request = result.scalars().first()
        if user_request is None:
            raise NotFoundError("Solicitação de cirurgia não encontrada")
        return user_request

    async def list_trackings(self, surgery_request_id: Optional[str] = None, status: Optional[str] = None,
                             limit: int = 100, offset: int = 0) -> List[UserBudgetTrackingModel]:
        stmt = select(UserBudgetTrackingModel)
        if surgery_request_id:
            stmt = stmt.where(UserBudgetTrackingModel.surgery_request_id == surgery_request_id)
        if status:
            stmt = stmt.where(UserBudgetTrackingModel.status == status)
        stmt = stmt.order_by(UserBudgetTrackingModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def get_tracking_breakdown(self, tracking_id: str) -> BudgetBreakdownResponse:
        tracking = await self.workflow.get_tracking(tracking_id)
        if not tracking.budget_id:
            raise NotFoundError("Nenhum orçamento vinculado a este acompanhamento")
        return await self.budget_service.get_breakdown(tracking.budget_id)
