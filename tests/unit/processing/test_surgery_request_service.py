import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from cirplane.src.api.models.surgery_request_models import SurgeryRequestCreate, SurgeryRequestUpdate
from cirplane.src.core.exceptions import NotFoundError, ValidationFailure
from cirplane.src.core.monitoring.app_metrics import MetricsCollector
from cirplane.src.processing.budget_calculator import BudgetCalculator
from cirplane.src.processing.budget_service import BudgetService
from cirplane.src.processing.surgery_request_service import SurgeryRequestService


@pytest.fixture
def budget_service(db_session) -> BudgetService:
    return BudgetService(db_session, BudgetCalculator(Decimal("0.05")), MagicMock(spec=MetricsCollector))


@pytest.fixture
def surgery_request_service(db_session, budget_service) -> SurgeryRequestService:
    return SurgeryRequestService(db_session, budget_service)


@pytest.mark.asyncio
async def test_create_request_stores_lists_and_fee(surgery_request_service, registry_rows):
    created = await surgery_request_service.create_request(SurgeryRequestCreate(
        patient_id=registry_rows.patient.id,
        doctor_id=registry_rows.doctor.id,
        procedure_ids=["proc-1"],
        opme_requests=[{"opme_id": "opme-1", "quantity": 2}],
        needs_icu=True,
        icu_days="2",
        ward_days="",
        doctor_fee="4500.50",
    ))

    assert created.doctor_fee == Decimal("4500.50")
    assert created.opme_requests == [{"opme_id": "opme-1", "quantity": 2, "description": None}]
    assert created.icu_days == 2
    assert created.ward_days is None


@pytest.mark.asyncio
async def test_create_request_checks_patient_and_doctor(surgery_request_service, registry_rows):
    with pytest.raises(ValidationFailure, match="Paciente"):
        await surgery_request_service.create_request(SurgeryRequestCreate(
            patient_id="missing", doctor_id=registry_rows.doctor.id, doctor_fee=1000,
        ))
    with pytest.raises(ValidationFailure, match="Médico"):
        await surgery_request_service.create_request(SurgeryRequestCreate(
            patient_id=registry_rows.patient.id, doctor_id="missing", doctor_fee=1000,
        ))


@pytest.mark.asyncio
async def test_update_request_recomputes_budget_totals(surgery_request_service, budget_service, seeded_request, seeded_budget):
    # Budget doctor fee 5000, ICU 3 x 1000, anesthetist 800 -> 8800 * 1.05
    await budget_service.recalculate_for_request(seeded_request)
    assert (await budget_service.get_budget(seeded_budget.id)).total_cost == Decimal("9240.00")

    await surgery_request_service.update_request(seeded_request.id, SurgeryRequestUpdate(needs_icu=False))

    refreshed = await budget_service.get_budget(seeded_budget.id)
    assert refreshed.total_cost == Decimal("6090.00")


@pytest.mark.asyncio
async def test_update_request_ignores_null_for_required_fields(surgery_request_service, seeded_request):
    updated = await surgery_request_service.update_request(
        seeded_request.id, SurgeryRequestUpdate(doctor_fee=None, hospital_equipment=None, procedure_duration="3h")
    )

    assert updated.doctor_fee == Decimal("5000.00")
    assert updated.hospital_equipment == []
    assert updated.procedure_duration == "3h"


@pytest.mark.asyncio
async def test_get_unknown_request(surgery_request_service):
    with pytest.raises(NotFoundError):
        await surgery_request_service.get_request("missing")


@pytest.mark.asyncio
async def test_list_requests_by_doctor(surgery_request_service, seeded_request, registry_rows):
    assert [r.id for r in await surgery_request_service.list_requests(doctor_id=registry_rows.doctor.id)] == [seeded_request.id]
    assert await surgery_request_service.list_requests(doctor_id="someone-else") == []
