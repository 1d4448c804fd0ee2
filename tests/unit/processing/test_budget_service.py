import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from sqlalchemy import select

from cirplane.src.api.models.budget_models import BudgetCreate, BudgetStatus, BudgetUpdate
from cirplane.src.core.database.models import BudgetModel
from cirplane.src.core.exceptions import NotFoundError, ValidationFailure
from cirplane.src.core.monitoring.app_metrics import MetricsCollector
from cirplane.src.processing.budget_calculator import BudgetCalculator
from cirplane.src.processing.budget_service import BudgetService


@pytest.fixture
def mock_metrics_collector() -> MagicMock:
    return MagicMock(spec=MetricsCollector)


@pytest.fixture
def budget_service(db_session, mock_metrics_collector) -> BudgetService:
    return BudgetService(db_session, BudgetCalculator(Decimal("0.05")), mock_metrics_collector)


def budget_payload(seeded_request, registry_rows, **overrides) -> BudgetCreate:
    values = {
        "surgery_request_id": seeded_request.id,
        "hospital_id": registry_rows.hospital.id,
        "icu_daily_cost": "1000",
        "anesthetist_fee": "800",
        "doctor_fee": "5000",
        "opme_quotes": [{
            "opme_id": "opme-1",
            "description": "Parafuso pedicular",
            "quantity": 2,
            "quotes": [
                {"supplier_id": "sup-a", "supplier_name": "Fornecedor A", "price": "1200.00"},
                {"supplier_id": "sup-b", "supplier_name": "Fornecedor B", "price": ""},
            ],
            "selected_supplier_id": "sup-a",
        }],
    }
    values.update(overrides)
    return BudgetCreate(**values)


@pytest.mark.asyncio
async def test_create_budget_computes_total(budget_service, seeded_request, registry_rows, mock_metrics_collector):
    budget = await budget_service.create_budget(budget_payload(seeded_request, registry_rows))

    # 3 ICU days * 1000 + 5000 + 800 + 1200 = 10000; 5% fee -> 10500
    assert budget.total_cost == Decimal("10500.00")
    assert budget.status == BudgetStatus.AWAITING_QUOTE.value
    assert budget.opme_quotes[0]["quotes"][0]["price"] == "1200.00"
    assert budget.opme_quotes[0]["quotes"][1]["price"] is None
    mock_metrics_collector.record_budget_calculation.assert_called_once_with("budget_create", 10500.0)


@pytest.mark.asyncio
async def test_create_budget_ignores_client_total(budget_service, seeded_request, registry_rows):
    payload = budget_payload(seeded_request, registry_rows).model_dump()
    payload["total_cost"] = "1.00"

    budget = await budget_service.create_budget(BudgetCreate(**payload))

    assert budget.total_cost == Decimal("10500.00")


@pytest.mark.asyncio
async def test_create_budget_requires_existing_references(budget_service, seeded_request, registry_rows):
    with pytest.raises(ValidationFailure, match="Pedido de cirurgia"):
        await budget_service.create_budget(budget_payload(seeded_request, registry_rows, surgery_request_id="missing"))
    with pytest.raises(ValidationFailure, match="Hospital"):
        await budget_service.create_budget(budget_payload(seeded_request, registry_rows, hospital_id="missing"))


@pytest.mark.asyncio
async def test_update_budget_recalculates_total(budget_service, seeded_request, registry_rows):
    budget = await budget_service.create_budget(budget_payload(seeded_request, registry_rows))

    updated = await budget_service.update_budget(
        budget.id, BudgetUpdate(anesthetist_fee=Decimal("1800"), status=BudgetStatus.AWAITING_PATIENT)
    )

    assert updated.total_cost == Decimal("11550.00")
    assert updated.status == "AWAITING_PATIENT"
    assert updated.icu_daily_cost == Decimal("1000.00")


@pytest.mark.asyncio
async def test_update_budget_without_status_keeps_status(budget_service, seeded_request, registry_rows):
    budget = await budget_service.create_budget(
        budget_payload(seeded_request, registry_rows, status=BudgetStatus.AWAITING_PAYMENT)
    )

    updated = await budget_service.update_budget(budget.id, BudgetUpdate(opme_quotes=[]))

    assert updated.status == "AWAITING_PAYMENT"
    assert updated.total_cost == Decimal("9240.00")


@pytest.mark.asyncio
async def test_breakdown_reports_rate_and_lines(budget_service, seeded_request, registry_rows):
    budget = await budget_service.create_budget(budget_payload(seeded_request, registry_rows))

    breakdown = await budget_service.get_breakdown(budget.id)

    assert breakdown.budget_id == budget.id
    assert breakdown.service_fee_rate == Decimal("0.05")
    assert breakdown.subtotal == Decimal("10000.00")
    assert breakdown.total == budget.total_cost
    assert {item.category for item in breakdown.line_items} == {"accommodation", "fee", "opme"}


@pytest.mark.asyncio
async def test_recalculate_for_request_updates_every_budget(budget_service, db_session, seeded_request, registry_rows):
    first = await budget_service.create_budget(budget_payload(seeded_request, registry_rows))
    second = await budget_service.create_budget(budget_payload(seeded_request, registry_rows, opme_quotes=[]))

    seeded_request.icu_days = 1
    count = await budget_service.recalculate_for_request(seeded_request)

    assert count == 2
    rows = (await db_session.execute(select(BudgetModel).order_by(BudgetModel.total_cost))).scalars().all()
    # 1000 + 5000 + 800 (+1200) with 5% fee
    assert [row.total_cost for row in rows] == [Decimal("7140.00"), Decimal("8400.00")]
    assert {row.id for row in rows} == {first.id, second.id}


@pytest.mark.asyncio
async def test_list_budgets_filters_by_status(budget_service, seeded_request, registry_rows):
    await budget_service.create_budget(budget_payload(seeded_request, registry_rows))
    approved = await budget_service.create_budget(
        budget_payload(seeded_request, registry_rows, status=BudgetStatus.APPROVED)
    )

    result = await budget_service.list_budgets(status=BudgetStatus.APPROVED)

    assert [budget.id for budget in result] == [approved.id]


@pytest.mark.asyncio
async def test_get_and_delete_budget(budget_service, seeded_request, registry_rows):
    budget = await budget_service.create_budget(budget_payload(seeded_request, registry_rows))

    await budget_service.delete_budget(budget.id)

    with pytest.raises(NotFoundError):
        await budget_service.get_budget(budget.id)
