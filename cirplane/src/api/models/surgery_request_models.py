from pydantic import BaseModel, Field, constr, field_validator
from datetime import datetime
from decimal import Decimal
from typing import Optional, List


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class OPMERequestItem(BaseModel):
    opme_id: constr(strip_whitespace=True, min_length=1)
    quantity: int = Field(1, gt=0)
    description: Optional[str] = None


class SurgeryRequestBase(BaseModel):
    patient_id: constr(strip_whitespace=True, min_length=1)
    doctor_id: constr(strip_whitespace=True, min_length=1)
    anesthesia_id: Optional[str] = None
    procedure_ids: List[str] = Field(default_factory=list)
    opme_requests: List[OPMERequestItem] = Field(default_factory=list)
    hospital_equipment: List[str] = Field(default_factory=list)
    exams_during_stay: List[str] = Field(default_factory=list)

    needs_icu: bool = False
    icu_days: Optional[int] = Field(None, ge=0)
    ward_days: Optional[int] = Field(None, ge=0)
    room_days: Optional[int] = Field(None, ge=0)
    procedure_duration: Optional[constr(strip_whitespace=True, max_length=100)] = None

    doctor_fee: Decimal = Field(..., ge=Decimal(0), max_digits=12, decimal_places=2)

    blood_reserve: bool = False
    blood_units: Optional[int] = Field(None, ge=0)
    evoked_potential: bool = False

    @field_validator("anesthesia_id", "icu_days", "ward_days", "room_days", "blood_units", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class SurgeryRequestCreate(SurgeryRequestBase):
    pass


class SurgeryRequestUpdate(BaseModel):
    patient_id: Optional[constr(strip_whitespace=True, min_length=1)] = None
    doctor_id: Optional[constr(strip_whitespace=True, min_length=1)] = None
    anesthesia_id: Optional[str] = None
    procedure_ids: Optional[List[str]] = None
    opme_requests: Optional[List[OPMERequestItem]] = None
    hospital_equipment: Optional[List[str]] = None
    exams_during_stay: Optional[List[str]] = None

    needs_icu: Optional[bool] = None
    icu_days: Optional[int] = Field(None, ge=0)
    ward_days: Optional[int] = Field(None, ge=0)
    room_days: Optional[int] = Field(None, ge=0)
    procedure_duration: Optional[constr(strip_whitespace=True, max_length=100)] = None

    doctor_fee: Optional[Decimal] = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)

    blood_reserve: Optional[bool] = None
    blood_units: Optional[int] = Field(None, ge=0)
    evoked_potential: Optional[bool] = None

    @field_validator("anesthesia_id", "icu_days", "ward_days", "room_days", "blood_units", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class SurgeryRequestResponse(SurgeryRequestBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
