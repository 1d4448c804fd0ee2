import hashlib
import structlog
from typing import Optional, Dict, Any, Callable
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from cirplane.src.core.database.models.audit_log_db import AuditLogModel

logger = structlog.get_logger(__name__)

# Detail keys holding personal identifiers; stored as SHA-256 digests only.
HASHED_DETAIL_KEYS = frozenset({"email", "cpf", "patient_cpf"})


def hash_identifier(identifier: Optional[str]) -> Optional[str]:
    if not identifier:
        return None
    return hashlib.sha256(identifier.strip().lower().encode('utf-8')).hexdigest()


class AuditLogger:
    """
    Records who did what to which resource in the audit_logs table.

    Entries are written in a session of their own, so an entry survives the
    rollback of the request that produced it. Storage failures are logged and
    swallowed: auditing never changes the outcome of a request.
    """

    def __init__(self, db_session_factory: Callable[[], AsyncSession]):
        self.db_session_factory = db_session_factory
        logger.info("AuditLogger initialized.")

    @staticmethod
    def _scrub(details: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if details is None:
            return None
        return {
            key: hash_identifier(value) if key in HASHED_DETAIL_KEYS and isinstance(value, str) else value
            for key, value in details.items()
        }

    async def log_access(
        self,
        user_id: Optional[str],
        action: str,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        success: bool = True,
        failure_reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        entry = AuditLogModel(
            user_id=user_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            ip_address=ip_address,
            user_agent=user_agent,
            success=success,
            failure_reason=failure_reason,
            details=self._scrub(details),
        )
        try:
            async with self.db_session_factory() as session:
                async with session.begin():
                    session.add(entry)
        except Exception as e:
            logger.error("Failed to store audit entry", action=action, resource=resource,
                         resource_id=resource_id, error=str(e), exc_info=True)
            return
        logger.debug("Audit entry stored", action=action, resource=resource, success=success)

    async def log_request(self, request: Request, action: str, **fields: Any):
        """log_access with the caller's address and user agent taken from the HTTP request."""
        fields.setdefault("user_id", None)
        await self.log_access(
            action=action,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            **fields,
        )
