import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import select

from cirplane.src.core.database.models import AuditLogModel
from cirplane.src.core.monitoring.audit_logger import AuditLogger, hash_identifier


@pytest.mark.asyncio
async def test_log_access_stores_row(session_factory):
    audit_logger = AuditLogger(db_session_factory=session_factory)

    await audit_logger.log_access(
        user_id=None, action="CREATE_USER_FAILED", resource="UserProfile",
        ip_address="10.0.0.1", user_agent="pytest", success=False,
        failure_reason="Email inválido", details={"role": "admin"},
    )

    async with session_factory() as session:
        row = (await session.execute(select(AuditLogModel))).scalars().one()
    assert row.action == "CREATE_USER_FAILED"
    assert row.success is False
    assert row.failure_reason == "Email inválido"
    assert row.details == {"role": "admin"}


@pytest.mark.asyncio
async def test_log_access_never_raises():
    failing_factory = MagicMock(side_effect=RuntimeError("database down"))
    audit_logger = AuditLogger(db_session_factory=failing_factory)

    await audit_logger.log_access(user_id="u1", action="HEALTH_CHECK")

    failing_factory.assert_called_once()


@pytest.mark.asyncio
async def test_personal_identifiers_are_hashed(session_factory):
    audit_logger = AuditLogger(db_session_factory=session_factory)

    await audit_logger.log_access(user_id=None, action="CREATE_USER_SUCCESS",
                                  details={"email": " Chefe@CirPlane.com", "role": "admin"})

    async with session_factory() as session:
        row = (await session.execute(select(AuditLogModel))).scalars().one()
    assert row.details["role"] == "admin"
    assert row.details["email"] == hash_identifier("chefe@cirplane.com")
    assert "cirplane" not in row.details["email"]


@pytest.mark.asyncio
async def test_log_request_takes_client_data_from_request():
    audit_logger = AuditLogger(db_session_factory=MagicMock())
    audit_logger.log_access = AsyncMock()
    request = MagicMock()
    request.client.host = "10.1.2.3"
    request.headers = {"user-agent": "curl/8.0"}

    await audit_logger.log_request(request, "HEALTH_CHECK", resource="System")

    audit_logger.log_access.assert_awaited_once_with(
        action="HEALTH_CHECK", ip_address="10.1.2.3", user_agent="curl/8.0", resource="System", user_id=None,
    )
