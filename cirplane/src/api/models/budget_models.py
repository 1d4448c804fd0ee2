from pydantic import BaseModel, Field, constr, field_validator
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List


class BudgetStatus(str, Enum):
    APPROVED = "APPROVED"
    AWAITING_QUOTE = "AWAITING_QUOTE"
    AWAITING_PATIENT = "AWAITING_PATIENT"
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    CANCELED = "CANCELED"


PENDING_BUDGET_STATUSES = (
    BudgetStatus.AWAITING_QUOTE,
    BudgetStatus.AWAITING_PATIENT,
    BudgetStatus.AWAITING_PAYMENT,
)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class OPMEQuoteLine(BaseModel):
    """One supplier's price for a requested material."""
    supplier_id: str
    supplier_name: Optional[str] = None
    price: Optional[Decimal] = None

    @field_validator("price", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class OPMEQuote(BaseModel):
    """Candidate supplier prices for one requested material; at most one supplier is selected."""
    opme_id: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    quotes: List[OPMEQuoteLine] = Field(default_factory=list)
    selected_supplier_id: Optional[str] = None

    @field_validator("quotes", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return [] if value is None else value

    @field_validator("selected_supplier_id", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


MoneyField = Optional[Decimal]


class BudgetBase(BaseModel):
    surgery_request_id: constr(strip_whitespace=True, min_length=1)
    hospital_id: constr(strip_whitespace=True, min_length=1)
    opme_quotes: List[OPMEQuote] = Field(default_factory=list)
    icu_daily_cost: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    ward_daily_cost: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    room_daily_cost: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    anesthetist_fee: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    evoked_potential_fee: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    doctor_fee: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    status: BudgetStatus = BudgetStatus.AWAITING_QUOTE

    @field_validator(
        "icu_daily_cost", "ward_daily_cost", "room_daily_cost",
        "anesthetist_fee", "evoked_potential_fee", "doctor_fee",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class BudgetCreate(BudgetBase):
    # total_cost is deliberately absent: it is always computed.
    pass


class BudgetUpdate(BaseModel):
    surgery_request_id: Optional[constr(strip_whitespace=True, min_length=1)] = None
    hospital_id: Optional[constr(strip_whitespace=True, min_length=1)] = None
    opme_quotes: Optional[List[OPMEQuote]] = None
    icu_daily_cost: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    ward_daily_cost: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    room_daily_cost: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    anesthetist_fee: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    evoked_potential_fee: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    doctor_fee: MoneyField = Field(None, ge=Decimal(0), max_digits=12, decimal_places=2)
    status: Optional[BudgetStatus] = None

    @field_validator(
        "icu_daily_cost", "ward_daily_cost", "room_daily_cost",
        "anesthetist_fee", "evoked_potential_fee", "doctor_fee",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class BudgetResponse(BudgetBase):
    id: str
    total_cost: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BudgetLineItem(BaseModel):
    category: str  # accommodation | fee | opme
    description: str
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    amount: Decimal


class BudgetTotals(BaseModel):
    subtotal: Decimal
    service_fee: Decimal
    total: Decimal
    service_fee_rate: Decimal
    line_items: List[BudgetLineItem] = Field(default_factory=list)


class BudgetBreakdownResponse(BudgetTotals):
    budget_id: str
    surgery_request_id: str
    status: BudgetStatus
