import structlog
from typing import Callable, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models.user_db import AuthIdentityModel
from ..exceptions import IdentityProviderError
from .password_hasher import PasswordHasher

logger = structlog.get_logger(__name__)

class IdentityProvider:
    """
    Authentication identity store.

    Every call runs in its own session and commits immediately, so an identity
    exists independently of whatever transaction the caller has open. Callers
    that fail after `create_identity` are expected to call `delete_identity`.
    """

    def __init__(self, db_session_factory: Callable[[], AsyncSession], password_hasher: PasswordHasher):
        self.db_session_factory = db_session_factory
        self.password_hasher = password_hasher
        logger.info("IdentityProvider initialized.")

    async def create_identity(self, email: str, password: str, email_confirmed: bool = True) -> AuthIdentityModel:
        identity = AuthIdentityModel(
            email=email,
            password_hash=self.password_hasher.hash_password(password),
            email_confirmed=email_confirmed,
        )
        try:
            async with self.db_session_factory() as session:
                async with session.begin():
                    session.add(identity)
        except IntegrityError:
            logger.warn("Identity already exists for email", email=email)
            raise IdentityProviderError("Um usuário com este email já está registrado")
        except Exception as e:
            logger.error("Failed to create identity", email=email, error=str(e), exc_info=True)
            raise IdentityProviderError(str(e))

        logger.info("Identity created", identity_id=identity.id)
        return identity

    async def delete_identity(self, identity_id: str) -> bool:
        try:
            async with self.db_session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(AuthIdentityModel).where(AuthIdentityModel.id == identity_id)
                    )
        except Exception as e:
            logger.error("Failed to delete identity", identity_id=identity_id, error=str(e), exc_info=True)
            raise IdentityProviderError(str(e))

        deleted = (result.rowcount or 0) > 0
        logger.info("Identity delete requested", identity_id=identity_id, deleted=deleted)
        return deleted

    async def get_identity_by_email(self, email: str) -> Optional[AuthIdentityModel]:
        async with self.db_session_factory() as session:
            result = await session.execute(select(AuthIdentityModel).where(AuthIdentityModel.email == email))
            return result.scalars().first()

    async def authenticate(self, email: str, password: str) -> Optional[AuthIdentityModel]:
        identity = await self.get_identity_by_email(email)
        if identity is None or not self.password_hasher.verify_password(password, identity.password_hash):
            return None
        return identity
