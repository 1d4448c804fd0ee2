from typing import Any, List, Optional
import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.models.budget_models import (
    BudgetBreakdownResponse,
    BudgetCreate,
    BudgetStatus,
    BudgetTotals,
    BudgetUpdate,
)
from ..core.database.models.registry_db import HospitalModel
from ..core.database.models.surgery_db import BudgetModel, SurgeryRequestModel
from ..core.exceptions import NotFoundError, ValidationFailure
from ..core.monitoring.app_metrics import MetricsCollector
from .budget_calculator import BudgetCalculator

logger = structlog.get_logger(__name__)


class BudgetService:
    """
    Budget persistence. total_cost is never taken from callers: every write
    recomputes it from the budget and its surgery request.
    """

    def __init__(self, db_session: AsyncSession, calculator: BudgetCalculator,
                 metrics_collector: Optional[MetricsCollector] = None):
        self.db_session = db_session
        self.calculator = calculator
        self.metrics_collector = metrics_collector

    async def list_budgets(self, status: Optional[BudgetStatus] = None,
                           surgery_request_id: Optional[str] = None,
                           limit: int = 100, offset: int = 0) -> List[BudgetModel]:
        stmt = select(BudgetModel)
        if status is not None:
            stmt = stmt.where(BudgetModel.status == BudgetStatus(status).value)
        if surgery_request_id:
            stmt = stmt.where(BudgetModel.surgery_request_id == surgery_request_id)
        stmt = stmt.order_by(BudgetModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def get_budget(self, budget_id: str) -> BudgetModel:
        result = await self.db_session.execute(select(BudgetModel).where(BudgetModel.id == budget_id))
        budget = result.scalars().first()
        if budget is None:
            raise NotFoundError("Orçamento não encontrado")
        return budget

    async def create_budget(self, data: BudgetCreate) -> BudgetModel:
        surgery_request = await self._get_surgery_request(data.surgery_request_id)
        await self._ensure_hospital(data.hospital_id)

        budget = BudgetModel(**self._to_columns(data.model_dump()))
        self._recalculate(budget, surgery_request, trigger="budget_create")
        self.db_session.add(budget)
        await self._commit()
        await self.db_session.refresh(budget)
        logger.info("Budget created", budget_id=budget.id, surgery_request_id=budget.surgery_request_id,
                    total_cost=str(budget.total_cost))
        return budget

    async def update_budget(self, budget_id: str, data: BudgetUpdate) -> BudgetModel:
        budget = await self.get_budget(budget_id)
        changes = self._to_columns(data.model_dump(exclude_unset=True))
        if changes.get("status") is None:
            changes.pop("status", None)

        if "hospital_id" in changes:
            await self._ensure_hospital(changes["hospital_id"])
        surgery_request = await self._get_surgery_request(changes.get("surgery_request_id") or budget.surgery_request_id)

        for field, value in changes.items():
            setattr(budget, field, value)
        self._recalculate(budget, surgery_request, trigger="budget_update")
        await self._commit()
        await self.db_session.refresh(budget)
        logger.info("Budget updated", budget_id=budget_id, fields=sorted(changes.keys()), total_cost=str(budget.total_cost))
        return budget

    async def delete_budget(self, budget_id: str) -> None:
        budget = await self.get_budget(budget_id)
        await self.db_session.delete(budget)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warn("Budget delete blocked by references", budget_id=budget_id, error=str(e))
            raise ValidationFailure("Orçamento vinculado a um acompanhamento e não pode ser excluído")
        logger.info("Budget deleted", budget_id=budget_id)

    async def get_breakdown(self, budget_id: str) -> BudgetBreakdownResponse:
        budget = await self.get_budget(budget_id)
        surgery_request = await self._get_surgery_request(budget.surgery_request_id)
        totals = self.calculator.calculate(surgery_request, budget)
        if self.metrics_collector:
            self.metrics_collector.record_budget_calculation("breakdown")
        return BudgetBreakdownResponse(
            budget_id=budget.id,
            surgery_request_id=budget.surgery_request_id,
            status=BudgetStatus(budget.status),
            **totals.model_dump(),
        )

    async def recalculate_for_request(self, surgery_request: SurgeryRequestModel, commit: bool = True) -> int:
        """Recomputes the totals of every budget built on the given surgery request."""
        result = await self.db_session.execute(
            select(BudgetModel).where(BudgetModel.surgery_request_id == surgery_request.id)
        )
        budgets = list(result.scalars().all())
        for budget in budgets:
            self._recalculate(budget, surgery_request, trigger="request_update")
        if commit and budgets:
            await self._commit()
        logger.info("Budgets recalculated for surgery request", surgery_request_id=surgery_request.id, count=len(budgets))
        return len(budgets)

    def _recalculate(self, budget: BudgetModel, surgery_request: Any, trigger: str) -> BudgetTotals:
        totals = self.calculator.calculate(surgery_request, budget)
        budget.total_cost = totals.total
        if self.metrics_collector:
            self.metrics_collector.record_budget_calculation(trigger, float(totals.total))
        return totals

    async def _get_surgery_request(self, surgery_request_id: str) -> SurgeryRequestModel:
        result = await self.db_session.execute(
            select(SurgeryRequestModel).where(SurgeryRequestModel.id == surgery_request_id)
        )
        surgery_request = result.scalars().first()
        if surgery_request is None:
            raise ValidationFailure("Pedido de cirurgia não encontrado")
        return surgery_request

    async def _ensure_hospital(self, hospital_id: str):
        result = await self.db_session.execute(select(HospitalModel.id).where(HospitalModel.id == hospital_id))
        if result.scalar_one_or_none() is None:
            raise ValidationFailure("Hospital não encontrado")

    async def _commit(self):
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warn("Integrity error on budget write", error=str(e))
            raise ValidationFailure("Dados do orçamento inválidos ou referência inexistente")

    @staticmethod
    def _to_columns(values: dict) -> dict:
        # JSON column needs plain JSON types; Decimals inside quotes become strings.
        columns = dict(values)
        if "opme_quotes" in columns:
            columns["opme_quotes"] = [
                BudgetService._quote_to_json(quote) for quote in (columns["opme_quotes"] or [])
            ]
        if isinstance(columns.get("status"), BudgetStatus):
            columns["status"] = columns["status"].value
        return columns

    @staticmethod
    def _quote_to_json(quote: dict) -> dict:
        quote = dict(quote)
        quote["quotes"] = [
            {**line, "price": str(line["price"]) if line.get("price") is not None else None}
            for line in quote.get("quotes") or []
        ]
        return quote
