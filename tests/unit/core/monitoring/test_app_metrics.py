import pytest
from unittest.mock import MagicMock

import cirplane.src.core.monitoring.app_metrics as app_metrics
from cirplane.src.core.monitoring.app_metrics import MetricsCollector


@pytest.fixture
def metrics_collector() -> MetricsCollector:
    return MetricsCollector()


# Patch all global metric objects for isolation in tests
@pytest.fixture(autouse=True)
def mock_global_metrics(monkeypatch):
    for name in ("BUDGET_CALCULATIONS_TOTAL", "BUDGET_TOTAL_AMOUNT", "APPROVAL_TRANSITIONS_TOTAL",
                 "USER_PROVISIONING_TOTAL", "DATABASE_QUERY_DURATION_SECONDS"):
        monkeypatch.setattr(app_metrics, name, MagicMock(spec=getattr(app_metrics, name)))


def test_record_budget_calculation(metrics_collector: MetricsCollector):
    metrics_collector.record_budget_calculation("budget_create", 10200.0)

    app_metrics.BUDGET_CALCULATIONS_TOTAL.labels.assert_called_once_with(trigger="budget_create")
    app_metrics.BUDGET_CALCULATIONS_TOTAL.labels.return_value.inc.assert_called_once_with()
    app_metrics.BUDGET_TOTAL_AMOUNT.observe.assert_called_once_with(10200.0)


def test_record_budget_calculation_without_total(metrics_collector: MetricsCollector):
    metrics_collector.record_budget_calculation("breakdown")

    app_metrics.BUDGET_TOTAL_AMOUNT.observe.assert_not_called()


@pytest.mark.parametrize("applied,outcome", [(True, "applied"), (False, "rejected")])
def test_record_status_transition(metrics_collector: MetricsCollector, applied, outcome):
    metrics_collector.record_status_transition("approved", applied=applied)

    app_metrics.APPROVAL_TRANSITIONS_TOTAL.labels.assert_called_once_with(target_status="approved", outcome=outcome)


def test_record_user_provisioning_unknown_role(metrics_collector: MetricsCollector):
    metrics_collector.record_user_provisioning(None, "validation_failed")

    app_metrics.USER_PROVISIONING_TOTAL.labels.assert_called_once_with(role="unknown", outcome="validation_failed")


def test_time_db_query_records_duration(metrics_collector: MetricsCollector):
    with metrics_collector.time_db_query("list_doctors"):
        pass

    app_metrics.DATABASE_QUERY_DURATION_SECONDS.labels.assert_called_once_with(query_name="list_doctors")
    observed = app_metrics.DATABASE_QUERY_DURATION_SECONDS.labels.return_value.observe.call_args[0][0]
    assert observed >= 0
