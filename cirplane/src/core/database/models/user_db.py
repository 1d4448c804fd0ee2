from sqlalchemy import Column, String, Boolean, Text, Date, ForeignKey, TIMESTAMP, func
from ..db_session import Base, generate_uuid, utcnow

class AuthIdentityModel(Base):
    """Login identity. Kept apart from profiles so it can be created and removed on its own."""
    __tablename__ = "auth_identities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    email_confirmed = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class UserProfileModel(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, unique=True, index=True) # AuthIdentityModel.id
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True) # admin | doctor | secretary
    crm = Column(String(50), nullable=True)
    specialty = Column(String(255), nullable=True)
    doctor_id = Column(String(36), nullable=True, index=True) # Secretaries only; a doctors row or a doctor profile
    is_admin = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class UserSurgeryRequestModel(Base):
    __tablename__ = "user_surgery_requests"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_profile_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)

    patient_name = Column(String(255), nullable=False)
    patient_cpf = Column(String(14), nullable=False)
    patient_birth_date = Column(Date, nullable=False)
    patient_contact = Column(String(100), nullable=False)
    procedure_description = Column(Text, nullable=False)
    urgency_level = Column(String(10), nullable=False, default="medium")
    preferred_date = Column(Date, nullable=True)
    observations = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class UserBudgetTrackingModel(Base):
    __tablename__ = "user_budget_tracking"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    surgery_request_id = Column(String(36), ForeignKey("user_surgery_requests.id"), nullable=False, index=True)
    budget_id = Column(String(36), ForeignKey("budgets.id"), nullable=True, index=True)

    status = Column(String(30), nullable=False, default="in_progress", index=True)
    user_approval = Column(String(30), nullable=True)
    user_feedback = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
