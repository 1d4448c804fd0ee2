import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator, Callable
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine
from sqlalchemy.orm import sessionmaker

from cirplane.src.core.database.db_session import Base
from cirplane.src.core.database.models import (  # importing the package registers every table on Base.metadata
    PatientModel, DoctorModel, HospitalModel, SurgeryRequestModel, BudgetModel,
    UserProfileModel, UserSurgeryRequestModel, UserBudgetTrackingModel,
)
from cirplane.src.core.config.settings import get_settings
from cirplane.src.core.security.password_hasher import PasswordHasher


@pytest.fixture()
def test_database_url(tmp_path) -> str:
    """TEST_DATABASE_URL when configured, otherwise a throwaway SQLite file for this test."""
    configured = get_settings().TEST_DATABASE_URL
    if configured:
        return configured
    return f"sqlite+aiosqlite:///{tmp_path / 'cirplane_test.db'}"


@pytest.fixture()
async def test_engine(test_database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """
    Fresh tables per test, so tests can commit freely without cleaning up
    after themselves. A shared TEST_DATABASE_URL database is reset first.
    """
    engine = create_async_engine(test_database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
def session_factory(test_engine: AsyncEngine) -> Callable[[], AsyncSession]:
    return sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def fast_password_hasher() -> PasswordHasher:
    # Low iteration count keeps hashing fast in tests.
    return PasswordHasher(iterations=1000)


# --- Seed data ---

@pytest.fixture()
async def registry_rows(db_session: AsyncSession) -> SimpleNamespace:
    """One patient, doctor and hospital."""
    patient = PatientModel(name="Maria Souza", cpf="12345678909", comorbidities=["hipertensão"])
    doctor = DoctorModel(name="Dr. Paulo Lima", cpf="98765432100", crm="CRM-SP 123456", specialty="Ortopedia")
    hospital = HospitalModel(name="Hospital Central", address="Rua A, 100")
    db_session.add_all([patient, doctor, hospital])
    await db_session.commit()
    return SimpleNamespace(patient=patient, doctor=doctor, hospital=hospital)


@pytest.fixture()
async def seeded_request(db_session: AsyncSession, registry_rows: SimpleNamespace) -> SurgeryRequestModel:
    """One surgery request: ICU for 3 days, doctor fee 5000."""
    surgery_request = SurgeryRequestModel(
        patient_id=registry_rows.patient.id,
        doctor_id=registry_rows.doctor.id,
        procedure_ids=[],
        opme_requests=[],
        hospital_equipment=[],
        exams_during_stay=[],
        needs_icu=True,
        icu_days=3,
        ward_days=0,
        doctor_fee=Decimal("5000.00"),
        evoked_potential=False,
    )
    db_session.add(surgery_request)
    await db_session.commit()
    return surgery_request


@pytest.fixture()
async def seeded_budget(db_session: AsyncSession, registry_rows: SimpleNamespace, seeded_request: SurgeryRequestModel) -> BudgetModel:
    budget = BudgetModel(
        surgery_request_id=seeded_request.id,
        hospital_id=registry_rows.hospital.id,
        opme_quotes=[],
        icu_daily_cost=Decimal("1000.00"),
        anesthetist_fee=Decimal("800.00"),
        doctor_fee=Decimal("5000.00"),
        total_cost=Decimal("0"),
        status="AWAITING_PATIENT",
    )
    db_session.add(budget)
    await db_session.commit()
    return budget


@pytest.fixture()
async def doctor_profile(db_session: AsyncSession) -> UserProfileModel:
    profile = UserProfileModel(
        user_id="identity-doctor-1",
        email="medico@cirplane.com.br",
        name="Dra. Ana Ribeiro",
        role="doctor",
        crm="CRM-RJ 555",
        specialty="Neurocirurgia",
        is_admin=False,
    )
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest.fixture()
async def tracking(db_session: AsyncSession, doctor_profile: UserProfileModel) -> UserBudgetTrackingModel:
    user_request = UserSurgeryRequestModel(
        user_profile_id=doctor_profile.id,
        patient_name="João Pereira",
        patient_cpf="11122233344",
        patient_birth_date=date(1980, 5, 17),
        patient_contact="(21) 99999-0000",
        procedure_description="Artrodese lombar",
    )
    db_session.add(user_request)
    await db_session.flush()
    tracking_row = UserBudgetTrackingModel(surgery_request_id=user_request.id, status="in_progress")
    db_session.add(tracking_row)
    await db_session.commit()
    return tracking_row
