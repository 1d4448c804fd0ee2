from enum import Enum
from typing import Dict, FrozenSet, Optional, Union
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database.db_session import utcnow
from ..core.database.models.surgery_db import BudgetModel
from ..core.database.models.user_db import UserBudgetTrackingModel
from ..core.exceptions import InvalidStatusTransitionError, NotFoundError, ValidationFailure
from ..core.monitoring.app_metrics import MetricsCollector

logger = structlog.get_logger(__name__)


class TrackingStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    AWAITING_PATIENT = "awaiting_patient"
    APPROVED = "approved"
    REVISION_REQUESTED = "revision_requested"
    REJECTED = "rejected"


class UserDecision(str, Enum):
    APPROVED = "approved"
    REVISION_REQUESTED = "revision_requested"
    REJECTED = "rejected"


INITIAL_TRACKING_STATUS = TrackingStatus.IN_PROGRESS

# Decision states have no outgoing transitions. Whether revision_requested should
# return to awaiting_patient for a new quoting round is still undecided.
ALLOWED_TRANSITIONS: Dict[TrackingStatus, FrozenSet[TrackingStatus]] = {
    TrackingStatus.IN_PROGRESS: frozenset({TrackingStatus.AWAITING_PATIENT}),
    TrackingStatus.AWAITING_PATIENT: frozenset({
        TrackingStatus.APPROVED,
        TrackingStatus.REVISION_REQUESTED,
        TrackingStatus.REJECTED,
    }),
    TrackingStatus.APPROVED: frozenset(),
    TrackingStatus.REVISION_REQUESTED: frozenset(),
    TrackingStatus.REJECTED: frozenset(),
}


def can_transition(current: Union[TrackingStatus, str], target: Union[TrackingStatus, str]) -> bool:
    try:
        current_status = TrackingStatus(current)
        target_status = TrackingStatus(target)
    except ValueError:
        return False
    return target_status in ALLOWED_TRANSITIONS[current_status]


def ensure_transition(current: Union[TrackingStatus, str], target: Union[TrackingStatus, str]) -> TrackingStatus:
    """Returns the target status, or raises InvalidStatusTransitionError."""
    if not can_transition(current, target):
        current_value = current.value if isinstance(current, TrackingStatus) else str(current)
        target_value = target.value if isinstance(target, TrackingStatus) else str(target)
        raise InvalidStatusTransitionError(current_value, target_value)
    return TrackingStatus(target)


def parse_decision(value: Union[UserDecision, str]) -> UserDecision:
    try:
        return UserDecision(value)
    except ValueError:
        raise ValidationFailure("Decisão deve ser: approved, revision_requested ou rejected")


class ApprovalWorkflowService:
    """
    Moves UserBudgetTracking records through the approval states.
    Every mutation goes through ensure_transition.
    """

    def __init__(self, db_session: AsyncSession, metrics_collector: Optional[MetricsCollector] = None):
        self.db_session = db_session
        self.metrics_collector = metrics_collector

    async def create_tracking(self, surgery_request_id: str, commit: bool = True) -> UserBudgetTrackingModel:
        tracking = UserBudgetTrackingModel(
            surgery_request_id=surgery_request_id,
            status=INITIAL_TRACKING_STATUS.value,
        )
        self.db_session.add(tracking)
        if commit:
            await self.db_session.commit()
            await self.db_session.refresh(tracking)
        logger.info("Budget tracking created", surgery_request_id=surgery_request_id)
        return tracking

    async def get_tracking(self, tracking_id: str) -> UserBudgetTrackingModel:
        result = await self.db_session.execute(
            select(UserBudgetTrackingModel).where(UserBudgetTrackingModel.id == tracking_id)
        )
        tracking = result.scalars().first()
        if tracking is None:
            raise NotFoundError("Acompanhamento de orçamento não encontrado")
        return tracking

    async def attach_budget(self, tracking_id: str, budget_id: str) -> UserBudgetTrackingModel:
        """Links a ready budget to the tracking record and hands it to the patient for review."""
        tracking = await self.get_tracking(tracking_id)

        budget = (await self.db_session.execute(
            select(BudgetModel.id).where(BudgetModel.id == budget_id)
        )).scalar_one_or_none()
        if budget is None:
            raise NotFoundError("Orçamento não encontrado")

        self._apply(tracking, TrackingStatus.AWAITING_PATIENT)
        tracking.budget_id = budget_id
        tracking.status = TrackingStatus.AWAITING_PATIENT.value
        tracking.updated_at = utcnow()
        await self.db_session.commit()
        logger.info("Budget attached to tracking", tracking_id=tracking_id, budget_id=budget_id)
        return tracking

    async def record_user_decision(
        self,
        tracking_id: str,
        decision: Union[UserDecision, str],
        feedback: Optional[str] = None,
    ) -> UserBudgetTrackingModel:
        """
        Records the patient's decision on a budget.

        Writes user_approval, status (same value as the decision), user_feedback
        (blank becomes null) and updated_at. Nothing else on the tracking or the
        budget is touched. Raises InvalidStatusTransitionError unless the tracking
        is awaiting the patient.
        """
        parsed_decision = parse_decision(decision)
        tracking = await self.get_tracking(tracking_id)
        self._apply(tracking, TrackingStatus(parsed_decision.value))

        tracking.user_approval = parsed_decision.value
        tracking.status = parsed_decision.value
        tracking.user_feedback = feedback.strip() if feedback and feedback.strip() else None
        tracking.updated_at = utcnow()
        await self.db_session.commit()

        logger.info("User decision recorded", tracking_id=tracking_id, decision=parsed_decision.value)
        return tracking

    def _apply(self, tracking: UserBudgetTrackingModel, target: TrackingStatus):
        try:
            ensure_transition(tracking.status, target)
        except InvalidStatusTransitionError:
            logger.warn("Rejected tracking status transition",
                        tracking_id=tracking.id, current_status=tracking.status, target_status=target.value)
            if self.metrics_collector:
                self.metrics_collector.record_status_transition(target.value, applied=False)
            raise
        if self.metrics_collector:
            self.metrics_collector.record_status_transition(target.value, applied=True)
