import pytest
from decimal import Decimal

from cirplane.src.core.database.models import BudgetModel
from cirplane.src.core.monitoring.app_metrics import MetricsCollector
from cirplane.src.processing.dashboard_service import DashboardService


@pytest.mark.asyncio
async def test_stats_on_empty_database(db_session):
    stats = await DashboardService(db_session, MetricsCollector()).get_stats()

    assert stats.patients == 0
    assert stats.budgets == 0
    assert stats.total_budget_value == Decimal("0.00")
    assert stats.pending_budgets == 0
    assert stats.approved_budgets == 0


@pytest.mark.asyncio
async def test_stats_count_rows_and_sum_totals(db_session, registry_rows, seeded_request):
    for status, total in (("AWAITING_QUOTE", "1000.00"), ("AWAITING_PAYMENT", "2500.50"),
                          ("APPROVED", "4000.00"), ("CANCELED", "99.50")):
        db_session.add(BudgetModel(
            surgery_request_id=seeded_request.id,
            hospital_id=registry_rows.hospital.id,
            opme_quotes=[],
            total_cost=Decimal(total),
            status=status,
        ))
    await db_session.commit()

    stats = await DashboardService(db_session, MetricsCollector()).get_stats()

    assert stats.patients == 1
    assert stats.doctors == 1
    assert stats.hospitals == 1
    assert stats.surgery_requests == 1
    assert stats.budgets == 4
    assert stats.total_budget_value == Decimal("7600.00")
    assert stats.pending_budgets == 2
    assert stats.approved_budgets == 1
