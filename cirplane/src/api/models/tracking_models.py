from pydantic import BaseModel, constr, field_validator
from datetime import date, datetime
from enum import Enum
from typing import Optional


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class UserSurgeryRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"


class UserSurgeryRequestCreate(BaseModel):
    user_profile_id: constr(strip_whitespace=True, min_length=1)
    patient_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    patient_cpf: constr(strip_whitespace=True, pattern=r"^\d{11}$")
    patient_birth_date: date
    patient_contact: constr(strip_whitespace=True, min_length=1, max_length=100)
    procedure_description: constr(strip_whitespace=True, min_length=1)
    urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM
    preferred_date: Optional[date] = None
    observations: Optional[str] = None

    @field_validator("patient_cpf", mode="before")
    @classmethod
    def digits_only(cls, value):
        if isinstance(value, str):
            return "".join(ch for ch in value if ch.isdigit())
        return value

    @field_validator("preferred_date", "observations", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class UserSurgeryRequestResponse(UserSurgeryRequestCreate):
    id: str
    status: UserSurgeryRequestStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TrackingResponse(BaseModel):
    id: str
    surgery_request_id: str
    budget_id: Optional[str] = None
    status: str
    user_approval: Optional[str] = None
    user_feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AttachBudgetRequest(BaseModel):
    budget_id: constr(strip_whitespace=True, min_length=1)


class UserDecisionRequest(BaseModel):
    # Validated against UserDecision by the workflow so an unknown value is a 400 with a localized message.
    decision: str
    feedback: Optional[str] = None
