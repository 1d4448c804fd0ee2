# Importing this package registers every model on Base.metadata (used by Alembic and test setup).

from .registry_db import (
    PatientModel,
    DoctorModel,
    HospitalModel,
    SupplierModel,
    OPMEModel,
    ProcedureModel,
    AnesthesiaTypeModel,
)
from .surgery_db import SurgeryRequestModel, BudgetModel
from .user_db import AuthIdentityModel, UserProfileModel, UserSurgeryRequestModel, UserBudgetTrackingModel
from .audit_log_db import AuditLogModel
