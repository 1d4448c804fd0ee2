import structlog
from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.models.user_models import (
    CreatedUser,
    CreateUserRequest,
    CreateUserResponse,
    DoctorListResponse,
    DoctorSummary,
    UserRole,
)
from ..core.config.settings import get_settings
from ..core.database.models.registry_db import DoctorModel
from ..core.database.models.user_db import UserProfileModel
from ..core.exceptions import IdentityProviderError, NotFoundError, ProvisioningError, ValidationFailure
from ..core.monitoring.app_metrics import MetricsCollector
from ..core.security.identity_provider import IdentityProvider
from ..core.security.password_hasher import generate_password
from .validation.user_validator import UserValidator

logger = structlog.get_logger(__name__)

# Placeholders for doctors rows created from an admin account; the admin screens fill them in later.
PLACEHOLDER_CPF = "00000000000"
PLACEHOLDER_TEXT = "Não informado"


def role_label(raw_role: Optional[str]) -> Optional[str]:
    """Metric label for a requested role: a known role, None when absent, "invalid" otherwise."""
    if raw_role is None or not str(raw_role).strip():
        return None
    try:
        return UserRole(str(raw_role).strip()).value
    except ValueError:
        return "invalid"


class UserProvisioningService:
    """
    Creates application users on behalf of an administrator.

    An account is an identity (login) plus a profile (role data). The identity
    lives in its own store, so a profile failure is compensated by deleting the
    identity that was just created. Doctors also get a doctors registry row;
    failing to write that row never fails the request.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        identity_provider: IdentityProvider,
        metrics_collector: MetricsCollector,
        validator: Optional[UserValidator] = None,
    ):
        self.db_session = db_session
        self.identity_provider = identity_provider
        self.metrics_collector = metrics_collector
        self.settings = get_settings()
        self.validator = validator or UserValidator(min_password_length=self.settings.MIN_PASSWORD_LENGTH)

    async def create_user(self, request: CreateUserRequest) -> CreateUserResponse:
        errors = self.validator.validate_create_request(request)
        if errors:
            self.metrics_collector.record_user_provisioning(role_label(request.role), "validation_failed")
            raise ValidationFailure(errors[0])

        email = request.email.strip()
        name = request.name.strip()
        role = UserRole(request.role.strip())
        doctor_id = request.doctor_id.strip() if role == UserRole.SECRETARY else None

        # Every check that can reject the request runs before an identity exists.
        if role == UserRole.SECRETARY and not await self._doctor_exists(doctor_id):
            self.metrics_collector.record_user_provisioning(role.value, "validation_failed")
            raise ValidationFailure("Médico não encontrado")

        if await self._email_registered(email):
            self.metrics_collector.record_user_provisioning(role.value, "validation_failed")
            raise ValidationFailure("Este email já está cadastrado")

        password_generated = not request.password
        password = request.password or generate_password(self.settings.GENERATED_PASSWORD_BYTES)

        try:
            identity = await self.identity_provider.create_identity(email, password, email_confirmed=True)
        except IdentityProviderError as e:
            self.metrics_collector.record_user_provisioning(role.value, "identity_failed")
            raise ProvisioningError(f"Erro ao criar usuário de autenticação: {e.message}")

        profile = UserProfileModel(
            user_id=identity.id,
            email=email,
            name=name,
            role=role.value,
            crm=request.crm.strip() if role == UserRole.DOCTOR else None,
            specialty=request.specialty.strip() if role == UserRole.DOCTOR else None,
            doctor_id=doctor_id,
            is_admin=role == UserRole.ADMIN,
        )
        self.db_session.add(profile)
        try:
            await self.db_session.commit()
        except Exception as e:
            await self.db_session.rollback()
            logger.error("Profile insert failed; removing identity", identity_id=identity.id, error=str(e), exc_info=True)
            await self._remove_identity(identity.id)
            self.metrics_collector.record_user_provisioning(role.value, "profile_failed_rolled_back")
            raise ProvisioningError(f"Erro ao criar perfil: {e}")

        if role == UserRole.DOCTOR:
            await self._create_doctor_record(identity.id, email, name, profile.crm, profile.specialty)

        self.metrics_collector.record_user_provisioning(role.value, "created")
        logger.info("User created", user_id=identity.id, role=role.value, password_generated=password_generated)

        return CreateUserResponse(
            message="Usuário criado com sucesso",
            user=CreatedUser(
                id=identity.id,
                email=email,
                name=name,
                role=role,
                password_generated=password_generated,
                password=password if password_generated else None,
            ),
        )

    async def list_doctors(self) -> DoctorListResponse:
        try:
            with self.metrics_collector.time_db_query("list_doctors"):
                result = await self.db_session.execute(select(DoctorModel).order_by(DoctorModel.name))
                doctors = [DoctorSummary.model_validate(row) for row in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching doctors", error=str(e), exc_info=True)
            raise ProvisioningError(f"Erro ao buscar médicos: {e}")
        return DoctorListResponse(doctors=doctors, count=len(doctors))

    async def list_profiles(self, role: Optional[UserRole] = None) -> List[UserProfileModel]:
        """User profiles, newest first."""
        stmt = select(UserProfileModel)
        if role is not None:
            stmt = stmt.where(UserProfileModel.role == UserRole(role).value)
        stmt = stmt.order_by(UserProfileModel.created_at.desc(), UserProfileModel.name)
        with self.metrics_collector.time_db_query("list_profiles"):
            result = await self.db_session.execute(stmt)
        return list(result.scalars().all())

    async def delete_profile(self, profile_id: str) -> UserProfileModel:
        """
        Removes a user: the profile row first, then its identity.
        A doctors registry row created for the user is kept.
        """
        result = await self.db_session.execute(select(UserProfileModel).where(UserProfileModel.id == profile_id))
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundError("Usuário não encontrado")

        await self.db_session.delete(profile)
        try:
            await self.db_session.commit()
        except Exception as e:
            await self.db_session.rollback()
            logger.error("Profile delete failed", profile_id=profile_id, error=str(e), exc_info=True)
            self.metrics_collector.record_user_provisioning(profile.role, "delete_failed")
            raise ProvisioningError(f"Erro ao excluir usuário: {e}")

        await self._remove_identity(profile.user_id)
        self.metrics_collector.record_user_provisioning(profile.role, "deleted")
        logger.info("User deleted", profile_id=profile_id, user_id=profile.user_id, role=profile.role)
        return profile

    async def _doctor_exists(self, doctor_id: str) -> bool:
        # A secretary may point at a doctors registry row or at a doctor's own profile.
        registry_hit = (await self.db_session.execute(
            select(DoctorModel.id).where(DoctorModel.id == doctor_id)
        )).scalar_one_or_none()
        if registry_hit is not None:
            return True
        profile_hit = (await self.db_session.execute(
            select(UserProfileModel.id).where(
                UserProfileModel.role == UserRole.DOCTOR.value,
                or_(UserProfileModel.id == doctor_id, UserProfileModel.user_id == doctor_id),
            )
        )).scalars().first()
        return profile_hit is not None

    async def _email_registered(self, email: str) -> bool:
        # An identity without a profile (e.g. left by a failed compensation) still owns the email.
        result = await self.db_session.execute(
            select(UserProfileModel.id).where(UserProfileModel.email == email)
        )
        if result.scalars().first() is not None:
            return True
        return await self.identity_provider.get_identity_by_email(email) is not None

    async def _remove_identity(self, identity_id: str):
        try:
            await self.identity_provider.delete_identity(identity_id)
        except IdentityProviderError as e:
            # The profile error is what the caller sees; the orphaned identity is only logged.
            logger.error("Compensating identity delete failed", identity_id=identity_id, error=e.message)

    async def _create_doctor_record(self, user_id: str, email: str, name: str, crm: str, specialty: str):
        doctor = DoctorModel(
            name=name,
            cpf=PLACEHOLDER_CPF,
            crm=crm,
            contact=PLACEHOLDER_TEXT,
            pix_key=PLACEHOLDER_TEXT,
            specialty=specialty,
            email=email,
            user_id=user_id,
        )
        self.db_session.add(doctor)
        try:
            await self.db_session.commit()
        except Exception as e:
            await self.db_session.rollback()
            logger.warn("Could not create doctors row for new doctor user", user_id=user_id, error=str(e))
