import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cirplane.src.main import app
from cirplane.src.api.dependencies import get_audit_logger, get_identity_provider
from cirplane.src.core.database.db_session import get_db_session
from cirplane.src.core.monitoring.audit_logger import AuditLogger
from cirplane.src.core.security.identity_provider import IdentityProvider


@pytest.fixture()
def override_dependencies(session_factory, fast_password_hasher):
    """Points the app's database-backed dependencies at the per-test SQLite database."""

    async def _get_test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    audit_logger = AuditLogger(db_session_factory=session_factory)
    identity_provider = IdentityProvider(session_factory, fast_password_hasher)

    app.dependency_overrides[get_db_session] = _get_test_db_session
    app.dependency_overrides[get_audit_logger] = lambda: audit_logger
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    # Unhandled errors go through the app's 500 handler instead of surfacing in the test.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
