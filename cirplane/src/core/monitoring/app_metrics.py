from prometheus_client import Counter, Histogram
import time
import structlog
from typing import Optional

logger = structlog.get_logger(__name__)

# --- Prometheus Metric Definitions ---
# Defined globally so they are registered with the default REGISTRY

# 1. Budget Metrics
BUDGET_CALCULATIONS_TOTAL = Counter(
    'budget_calculations_total',
    'Total budget total calculations, labeled by the operation that triggered them.',
    ['trigger']  # e.g., 'budget_create', 'budget_update', 'request_update', 'breakdown'
)

BUDGET_TOTAL_AMOUNT = Histogram(
    'budget_total_amount',
    'Distribution of computed budget totals (currency units).',
    buckets=(1000.0, 5000.0, 10000.0, 25000.0, 50000.0, 100000.0, 250000.0, 500000.0, float('inf'))
)

# 2. Approval Workflow Metrics
APPROVAL_TRANSITIONS_TOTAL = Counter(
    'approval_transitions_total',
    'Budget tracking status transitions, labeled by target status and outcome.',
    ['target_status', 'outcome']  # outcome: 'applied' | 'rejected'
)

# 3. User Provisioning Metrics
USER_PROVISIONING_TOTAL = Counter(
    'user_provisioning_total',
    'Admin user creation attempts, labeled by role and outcome.',
    ['role', 'outcome']  # outcome: 'created' | 'validation_failed' | 'identity_failed' | 'profile_failed_rolled_back'
)

# 4. Database Metrics
DATABASE_QUERY_DURATION_SECONDS = Histogram(
    'database_query_duration_seconds',
    'Duration of key database queries, in seconds.',
    ['query_name']
)


class MetricsCollector:
    """
    Thin facade over the module-level Prometheus metrics.
    """

    def __init__(self):
        logger.info("MetricsCollector initialized (stateless, uses global metrics).")

    def record_budget_calculation(self, trigger: str, total: Optional[float] = None):
        BUDGET_CALCULATIONS_TOTAL.labels(trigger=trigger).inc()
        if total is not None:
            BUDGET_TOTAL_AMOUNT.observe(total)

    def record_status_transition(self, target_status: str, applied: bool):
        APPROVAL_TRANSITIONS_TOTAL.labels(target_status=target_status, outcome='applied' if applied else 'rejected').inc()

    def record_user_provisioning(self, role: str, outcome: str):
        USER_PROVISIONING_TOTAL.labels(role=role or 'unknown', outcome=outcome).inc()

    def record_database_query_duration(self, query_name: str, duration_seconds: float):
        DATABASE_QUERY_DURATION_SECONDS.labels(query_name=query_name).observe(duration_seconds)

    class _DatabaseTimer:
        def __init__(self, collector_instance: 'MetricsCollector', query_name: str):
            self.collector = collector_instance
            self.query_name = query_name
            self.start_time: Optional[float] = None

        def __enter__(self):
            self.start_time = time.perf_counter()
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if self.start_time is not None:
                duration_seconds = time.perf_counter() - self.start_time
                self.collector.record_database_query_duration(self.query_name, duration_seconds)

    def time_db_query(self, query_name: str) -> _DatabaseTimer:
        """Returns a Timer context manager for a database query."""
        return self._DatabaseTimer(self, query_name)
