from decimal import Decimal
import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.models.budget_models import BudgetStatus, PENDING_BUDGET_STATUSES
from ..api.models.dashboard_models import DashboardStats
from ..core.database.models.registry_db import DoctorModel, HospitalModel, PatientModel
from ..core.database.models.surgery_db import BudgetModel, SurgeryRequestModel
from ..core.monitoring.app_metrics import MetricsCollector

logger = structlog.get_logger(__name__)


class DashboardService:
    def __init__(self, db_session: AsyncSession, metrics_collector: MetricsCollector):
        self.db_session = db_session
        self.metrics_collector = metrics_collector

    async def _count(self, model, *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return (await self.db_session.execute(stmt)).scalar_one() or 0

    async def get_stats(self) -> DashboardStats:
        with self.metrics_collector.time_db_query("dashboard_stats"):
            patients = await self._count(PatientModel)
            doctors = await self._count(DoctorModel)
            hospitals = await self._count(HospitalModel)
            surgery_requests = await self._count(SurgeryRequestModel)
            budgets = await self._count(BudgetModel)
            total_value = (await self.db_session.execute(
                select(func.coalesce(func.sum(BudgetModel.total_cost), 0))
            )).scalar_one()
            pending = await self._count(
                BudgetModel, BudgetModel.status.in_([s.value for s in PENDING_BUDGET_STATUSES])
            )
            approved = await self._count(BudgetModel, BudgetModel.status == BudgetStatus.APPROVED.value)

        stats = DashboardStats(
            patients=patients,
            doctors=doctors,
            hospitals=hospitals,
            surgery_requests=surgery_requests,
            budgets=budgets,
            total_budget_value=Decimal(str(total_value or 0)).quantize(Decimal("0.01")),
            pending_budgets=pending,
            approved_budgets=approved,
        )
        logger.debug("Dashboard stats computed", budgets=budgets, total_budget_value=str(stats.total_budget_value))
        return stats
