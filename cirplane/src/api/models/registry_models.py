from pydantic import BaseModel, Field, constr, field_validator
from datetime import date, datetime
from typing import Optional, List

# Shared constrained string types
NameStr = constr(strip_whitespace=True, min_length=1, max_length=255)
CpfStr = constr(strip_whitespace=True, pattern=r"^\d{11}$")
CnpjStr = constr(strip_whitespace=True, pattern=r"^\d{14}$")


def _digits_only(value):
    # Forms send formatted documents ("123.456.789-09"); storage keeps digits only.
    if isinstance(value, str):
        return "".join(ch for ch in value if ch.isdigit())
    return value


# --- Patients ---

class PatientBase(BaseModel):
    name: NameStr
    address: Optional[str] = None
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None
    cpf: CpfStr
    birth_date: Optional[date] = None
    comorbidities: List[str] = Field(default_factory=list)
    parent_name: Optional[NameStr] = None
    parent_cpf: Optional[CpfStr] = None

    @field_validator("cpf", "parent_cpf", mode="before")
    @classmethod
    def normalize_cpf(cls, value):
        return _digits_only(value) or None

    @field_validator("comorbidities", mode="before")
    @classmethod
    def split_comorbidities(cls, value):
        # Accepts the comma-separated form input as well as a list.
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

class PatientCreate(PatientBase):
    pass

class PatientUpdate(BaseModel):
    name: Optional[NameStr] = None
    address: Optional[str] = None
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None
    cpf: Optional[CpfStr] = None
    birth_date: Optional[date] = None
    comorbidities: Optional[List[str]] = None
    parent_name: Optional[NameStr] = None
    parent_cpf: Optional[CpfStr] = None

    @field_validator("cpf", "parent_cpf", mode="before")
    @classmethod
    def normalize_cpf(cls, value):
        return _digits_only(value) or None

class PatientResponse(PatientBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- Doctors ---

class DoctorBase(BaseModel):
    name: NameStr
    cpf: CpfStr
    crm: constr(strip_whitespace=True, min_length=1, max_length=50)
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None
    pix_key: Optional[constr(strip_whitespace=True, max_length=255)] = None
    specialty: Optional[constr(strip_whitespace=True, max_length=255)] = None
    email: Optional[constr(strip_whitespace=True, max_length=255)] = None

    @field_validator("cpf", mode="before")
    @classmethod
    def normalize_cpf(cls, value):
        return _digits_only(value)

class DoctorCreate(DoctorBase):
    pass

class DoctorUpdate(BaseModel):
    name: Optional[NameStr] = None
    cpf: Optional[CpfStr] = None
    crm: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None
    pix_key: Optional[constr(strip_whitespace=True, max_length=255)] = None
    specialty: Optional[constr(strip_whitespace=True, max_length=255)] = None
    email: Optional[constr(strip_whitespace=True, max_length=255)] = None

    @field_validator("cpf", mode="before")
    @classmethod
    def normalize_cpf(cls, value):
        return _digits_only(value) or None

class DoctorResponse(DoctorBase):
    # Doctors provisioned through user creation carry a placeholder CPF; relax the pattern on output.
    cpf: str
    id: str
    user_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- Hospitals ---

class HospitalBase(BaseModel):
    name: NameStr
    address: Optional[str] = None
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None

class HospitalCreate(HospitalBase):
    pass

class HospitalUpdate(BaseModel):
    name: Optional[NameStr] = None
    address: Optional[str] = None
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None

class HospitalResponse(HospitalBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- Suppliers ---

class SupplierBase(BaseModel):
    name: NameStr
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None
    cnpj: Optional[CnpjStr] = None

    @field_validator("cnpj", mode="before")
    @classmethod
    def normalize_cnpj(cls, value):
        return _digits_only(value) or None

class SupplierCreate(SupplierBase):
    pass

class SupplierUpdate(BaseModel):
    name: Optional[NameStr] = None
    contact: Optional[constr(strip_whitespace=True, max_length=100)] = None
    cnpj: Optional[CnpjStr] = None

    @field_validator("cnpj", mode="before")
    @classmethod
    def normalize_cnpj(cls, value):
        return _digits_only(value) or None

class SupplierResponse(SupplierBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- OPME materials ---

class OPMEBase(BaseModel):
    name: NameStr
    brand: Optional[constr(strip_whitespace=True, max_length=255)] = None
    supplier_id: Optional[str] = None

    @field_validator("brand", "supplier_id", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

class OPMECreate(OPMEBase):
    pass

class OPMEUpdate(BaseModel):
    name: Optional[NameStr] = None
    brand: Optional[constr(strip_whitespace=True, max_length=255)] = None
    supplier_id: Optional[str] = None

class OPMEResponse(OPMEBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- Procedures ---

class ProcedureCreate(BaseModel):
    name: NameStr

class ProcedureUpdate(BaseModel):
    name: Optional[NameStr] = None

class ProcedureResponse(ProcedureCreate):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- Anesthesia types ---

class AnesthesiaTypeCreate(BaseModel):
    type: NameStr

class AnesthesiaTypeUpdate(BaseModel):
    type: Optional[NameStr] = None

class AnesthesiaTypeResponse(AnesthesiaTypeCreate):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
