from sqlalchemy import Column, String, Integer, Boolean, Numeric, ForeignKey, TIMESTAMP, JSON, func
from ..db_session import Base, generate_uuid, utcnow

class SurgeryRequestModel(Base):
    __tablename__ = "surgery_requests"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False, index=True)
    anesthesia_id = Column(String(36), ForeignKey("anesthesia_types.id"), nullable=True)

    procedure_ids = Column(JSON, nullable=False, default=list)
    # [{"opme_id": ..., "quantity": ..., "description": ...}]
    opme_requests = Column(JSON, nullable=False, default=list)
    hospital_equipment = Column(JSON, nullable=False, default=list)
    exams_during_stay = Column(JSON, nullable=False, default=list)

    needs_icu = Column(Boolean, nullable=False, default=False)
    icu_days = Column(Integer, nullable=True)
    ward_days = Column(Integer, nullable=True)
    room_days = Column(Integer, nullable=True)
    procedure_duration = Column(String(100), nullable=True)

    doctor_fee = Column(Numeric(12, 2), nullable=False)

    blood_reserve = Column(Boolean, nullable=False, default=False)
    blood_units = Column(Integer, nullable=True)
    evoked_potential = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class BudgetModel(Base):
    __tablename__ = "budgets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    # One budget per surgery request is intended but not enforced.
    surgery_request_id = Column(String(36), ForeignKey("surgery_requests.id"), nullable=False, index=True)
    hospital_id = Column(String(36), ForeignKey("hospitals.id"), nullable=False, index=True)

    # [{"opme_id", "description", "quantity", "quotes": [{"supplier_id", "supplier_name", "price"}], "selected_supplier_id"}]
    opme_quotes = Column(JSON, nullable=False, default=list)

    icu_daily_cost = Column(Numeric(12, 2), nullable=True)
    ward_daily_cost = Column(Numeric(12, 2), nullable=True)
    room_daily_cost = Column(Numeric(12, 2), nullable=True)
    anesthetist_fee = Column(Numeric(12, 2), nullable=True)
    evoked_potential_fee = Column(Numeric(12, 2), nullable=True)
    doctor_fee = Column(Numeric(12, 2), nullable=True)

    total_cost = Column(Numeric(14, 2), nullable=False, default=0)
    status = Column(String(30), nullable=False, default="AWAITING_QUOTE", index=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
