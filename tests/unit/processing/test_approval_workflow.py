import pytest
from unittest.mock import MagicMock
from sqlalchemy import select

from cirplane.src.core.database.models import BudgetModel, UserBudgetTrackingModel
from cirplane.src.core.exceptions import InvalidStatusTransitionError, NotFoundError, ValidationFailure
from cirplane.src.core.monitoring.app_metrics import MetricsCollector
from cirplane.src.processing.approval_workflow import (
    ApprovalWorkflowService,
    TrackingStatus,
    UserDecision,
    can_transition,
    ensure_transition,
    parse_decision,
)


@pytest.fixture
def mock_metrics_collector() -> MagicMock:
    return MagicMock(spec=MetricsCollector)


@pytest.fixture
def workflow(db_session, mock_metrics_collector) -> ApprovalWorkflowService:
    return ApprovalWorkflowService(db_session, metrics_collector=mock_metrics_collector)


# --- Transition table ---

@pytest.mark.parametrize("current,target,allowed", [
    ("in_progress", "awaiting_patient", True),
    ("in_progress", "approved", False),
    ("awaiting_patient", "approved", True),
    ("awaiting_patient", "revision_requested", True),
    ("awaiting_patient", "rejected", True),
    ("awaiting_patient", "in_progress", False),
    ("approved", "rejected", False),
    ("revision_requested", "awaiting_patient", False),
    ("rejected", "approved", False),
    ("unknown", "approved", False),
])
def test_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_ensure_transition_raises_typed_error():
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        ensure_transition(TrackingStatus.APPROVED, TrackingStatus.REJECTED)
    assert exc_info.value.status_code == 409
    assert exc_info.value.current_status == "approved"
    assert exc_info.value.target_status == "rejected"


def test_parse_decision_rejects_unknown_value():
    assert parse_decision("approved") is UserDecision.APPROVED
    with pytest.raises(ValidationFailure):
        parse_decision("maybe")


# --- Service ---

@pytest.mark.asyncio
async def test_attach_budget_moves_tracking_to_awaiting_patient(workflow, tracking, seeded_budget, mock_metrics_collector):
    updated = await workflow.attach_budget(tracking.id, seeded_budget.id)

    assert updated.status == "awaiting_patient"
    assert updated.budget_id == seeded_budget.id
    mock_metrics_collector.record_status_transition.assert_called_once_with("awaiting_patient", applied=True)


@pytest.mark.asyncio
async def test_attach_budget_unknown_budget_is_not_found(workflow, tracking):
    with pytest.raises(NotFoundError):
        await workflow.attach_budget(tracking.id, "no-such-budget")


@pytest.mark.asyncio
async def test_attach_budget_twice_is_rejected(workflow, tracking, seeded_budget, mock_metrics_collector):
    await workflow.attach_budget(tracking.id, seeded_budget.id)

    with pytest.raises(InvalidStatusTransitionError):
        await workflow.attach_budget(tracking.id, seeded_budget.id)
    mock_metrics_collector.record_status_transition.assert_called_with("awaiting_patient", applied=False)


@pytest.mark.asyncio
async def test_decision_persists_exactly_three_fields(workflow, db_session, session_factory, tracking, seeded_budget):
    await workflow.attach_budget(tracking.id, seeded_budget.id)

    async with session_factory() as fresh:
        before_tracking = (await fresh.execute(
            select(UserBudgetTrackingModel).where(UserBudgetTrackingModel.id == tracking.id)
        )).scalars().one()
        before_budget = (await fresh.execute(select(BudgetModel).where(BudgetModel.id == seeded_budget.id))).scalars().one()
        tracking_snapshot = {c.name: getattr(before_tracking, c.name) for c in UserBudgetTrackingModel.__table__.columns}
        budget_snapshot = {c.name: getattr(before_budget, c.name) for c in BudgetModel.__table__.columns}

    await workflow.record_user_decision(tracking.id, "revision_requested", "  Prefiro outro hospital  ")

    async with session_factory() as fresh:
        after_tracking = (await fresh.execute(
            select(UserBudgetTrackingModel).where(UserBudgetTrackingModel.id == tracking.id)
        )).scalars().one()
        after_budget = (await fresh.execute(select(BudgetModel).where(BudgetModel.id == seeded_budget.id))).scalars().one()

        changed = {
            name for name, value in tracking_snapshot.items() if getattr(after_tracking, name) != value
        } - {"updated_at"}
        assert changed == {"user_approval", "status", "user_feedback"}
        assert after_tracking.user_approval == "revision_requested"
        assert after_tracking.status == "revision_requested"
        assert after_tracking.user_feedback == "Prefiro outro hospital"
        assert after_tracking.budget_id == seeded_budget.id

        assert {c.name: getattr(after_budget, c.name) for c in BudgetModel.__table__.columns} == budget_snapshot


@pytest.mark.asyncio
async def test_blank_feedback_is_stored_as_null(workflow, tracking, seeded_budget):
    await workflow.attach_budget(tracking.id, seeded_budget.id)

    updated = await workflow.record_user_decision(tracking.id, UserDecision.APPROVED, "   ")

    assert updated.user_feedback is None
    assert updated.status == "approved"


@pytest.mark.asyncio
async def test_decision_outside_awaiting_patient_is_rejected(workflow, session_factory, tracking):
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        await workflow.record_user_decision(tracking.id, "approved", "ok")
    assert exc_info.value.status_code == 409

    async with session_factory() as fresh:
        row = (await fresh.execute(
            select(UserBudgetTrackingModel).where(UserBudgetTrackingModel.id == tracking.id)
        )).scalars().one()
        assert row.status == "in_progress"
        assert row.user_approval is None
        assert row.user_feedback is None


@pytest.mark.asyncio
async def test_decision_states_are_terminal(workflow, tracking, seeded_budget):
    await workflow.attach_budget(tracking.id, seeded_budget.id)
    await workflow.record_user_decision(tracking.id, "rejected")

    with pytest.raises(InvalidStatusTransitionError):
        await workflow.record_user_decision(tracking.id, "approved")


@pytest.mark.asyncio
async def test_invalid_decision_value_is_validation_failure(workflow, tracking):
    with pytest.raises(ValidationFailure):
        await workflow.record_user_decision(tracking.id, "accepted")


@pytest.mark.asyncio
async def test_get_tracking_unknown_id(workflow):
    with pytest.raises(NotFoundError):
        await workflow.get_tracking("missing")


@pytest.mark.asyncio
async def test_create_tracking_starts_in_progress(workflow, tracking):
    created = await workflow.create_tracking(tracking.surgery_request_id)
    assert created.status == TrackingStatus.IN_PROGRESS.value
    assert created.budget_id is None
