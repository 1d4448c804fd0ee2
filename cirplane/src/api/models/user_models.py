from pydantic import BaseModel
from datetime import datetime
from enum import Enum
from typing import Optional, List


class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    SECRETARY = "secretary"


class CreateUserRequest(BaseModel):
    # Every field is optional at the schema level; UserValidator produces the
    # localized 400 messages the admin screens display.
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    crm: Optional[str] = None
    specialty: Optional[str] = None
    doctor_id: Optional[str] = None


class CreatedUser(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    password_generated: bool
    password: Optional[str] = None  # Only returned when generated


class CreateUserResponse(BaseModel):
    message: str
    user: CreatedUser


class DoctorSummary(BaseModel):
    id: str
    name: str
    crm: Optional[str] = None
    specialty: Optional[str] = None

    model_config = {"from_attributes": True}


class DoctorListResponse(BaseModel):
    doctors: List[DoctorSummary]
    count: int


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str


class UserProfileResponse(BaseModel):
    id: str
    user_id: str
    email: str
    name: str
    role: UserRole
    crm: Optional[str] = None
    specialty: Optional[str] = None
    doctor_id: Optional[str] = None
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}
