from sqlalchemy import Column, String, Date, Text, ForeignKey, TIMESTAMP, JSON, func
from ..db_session import Base, generate_uuid, utcnow

class PatientModel(Base):
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    address = Column(Text, nullable=True)
    contact = Column(String(100), nullable=True)
    cpf = Column(String(14), nullable=False, index=True)
    birth_date = Column(Date, nullable=True)
    comorbidities = Column(JSON, nullable=False, default=list)

    # Guardian data, only filled for minors
    parent_name = Column(String(255), nullable=True)
    parent_cpf = Column(String(14), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class DoctorModel(Base):
    __tablename__ = "doctors"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    cpf = Column(String(14), nullable=False)
    crm = Column(String(50), nullable=False, index=True)
    contact = Column(String(100), nullable=True)
    pix_key = Column(String(255), nullable=True)
    specialty = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    user_id = Column(String(36), nullable=True, index=True) # Identity id when the doctor is also a user

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class HospitalModel(Base):
    __tablename__ = "hospitals"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    address = Column(Text, nullable=True)
    contact = Column(String(100), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class SupplierModel(Base):
    __tablename__ = "suppliers"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    contact = Column(String(100), nullable=True)
    cnpj = Column(String(18), nullable=True, index=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class OPMEModel(Base):
    __tablename__ = "opmes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)
    brand = Column(String(255), nullable=True)
    supplier_id = Column(String(36), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class ProcedureModel(Base):
    __tablename__ = "procedures"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class AnesthesiaTypeModel(Base):
    __tablename__ = "anesthesia_types"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String(255), nullable=False, index=True)

    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
