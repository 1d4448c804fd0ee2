from typing import Callable, Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from cirplane.src.core.monitoring.audit_logger import AuditLogger
from cirplane.src.core.database.db_session import AsyncSessionLocal, get_db_session
from cirplane.src.core.monitoring.app_metrics import MetricsCollector
from cirplane.src.core.security.password_hasher import PasswordHasher
from cirplane.src.core.security.identity_provider import IdentityProvider
from cirplane.src.core.config.settings import get_settings
from cirplane.src.processing.budget_calculator import BudgetCalculator
from cirplane.src.processing.budget_service import BudgetService
from cirplane.src.processing.approval_workflow import ApprovalWorkflowService
from cirplane.src.processing.surgery_request_service import SurgeryRequestService
from cirplane.src.processing.user_request_service import UserRequestService
from cirplane.src.processing.dashboard_service import DashboardService
from cirplane.src.provisioning.user_provisioning_service import UserProvisioningService

logger = structlog.get_logger(__name__)

_audit_logger_instance: Optional[AuditLogger] = None
_metrics_collector_instance: Optional[MetricsCollector] = None
_password_hasher_instance: Optional[PasswordHasher] = None
_identity_provider_instance: Optional[IdentityProvider] = None

def get_async_session_factory() -> Callable[[], AsyncSession]:
    """Returns the raw session factory callable."""
    return AsyncSessionLocal

def get_audit_logger() -> AuditLogger:
    global _audit_logger_instance
    if _audit_logger_instance is None:
        factory = get_async_session_factory()
        _audit_logger_instance = AuditLogger(db_session_factory=factory)
        logger.info("Default AuditLogger instance created.")
    return _audit_logger_instance

def get_metrics_collector() -> MetricsCollector:
    global _metrics_collector_instance
    if _metrics_collector_instance is None:
        _metrics_collector_instance = MetricsCollector()
        logger.info("Default MetricsCollector instance created.")
    return _metrics_collector_instance

def get_password_hasher() -> PasswordHasher:
    global _password_hasher_instance
    if _password_hasher_instance is None:
        _password_hasher_instance = PasswordHasher(iterations=get_settings().PASSWORD_HASH_ITERATIONS)
        logger.info("Default PasswordHasher instance created.")
    return _password_hasher_instance

def get_identity_provider() -> IdentityProvider:
    global _identity_provider_instance
    if _identity_provider_instance is None:
        _identity_provider_instance = IdentityProvider(
            db_session_factory=get_async_session_factory(),
            password_hasher=get_password_hasher(),
        )
        logger.info("Default IdentityProvider instance created.")
    return _identity_provider_instance

def get_budget_calculator() -> BudgetCalculator:
    return BudgetCalculator(service_fee_rate=get_settings().SERVICE_FEE_RATE)

# --- Request-scoped services ---

def get_budget_service(
    db: AsyncSession = Depends(get_db_session),
    calculator: BudgetCalculator = Depends(get_budget_calculator),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> BudgetService:
    return BudgetService(db, calculator, metrics)

def get_approval_workflow_service(
    db: AsyncSession = Depends(get_db_session),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> ApprovalWorkflowService:
    return ApprovalWorkflowService(db, metrics)

def get_surgery_request_service(
    db: AsyncSession = Depends(get_db_session),
    budget_service: BudgetService = Depends(get_budget_service),
) -> SurgeryRequestService:
    return SurgeryRequestService(db, budget_service)

def get_user_request_service(
    db: AsyncSession = Depends(get_db_session),
    workflow: ApprovalWorkflowService = Depends(get_approval_workflow_service),
    budget_service: BudgetService = Depends(get_budget_service),
) -> UserRequestService:
    return UserRequestService(db, workflow, budget_service)

def get_dashboard_service(
    db: AsyncSession = Depends(get_db_session),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> DashboardService:
    return DashboardService(db, metrics)

def get_user_provisioning_service(
    db: AsyncSession = Depends(get_db_session),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> UserProvisioningService:
    return UserProvisioningService(db, identity_provider, metrics)
