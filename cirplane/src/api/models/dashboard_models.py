from pydantic import BaseModel
from decimal import Decimal


class DashboardStats(BaseModel):
    patients: int
    doctors: int
    hospitals: int
    surgery_requests: int
    budgets: int
    total_budget_value: Decimal
    pending_budgets: int
    approved_budgets: int
