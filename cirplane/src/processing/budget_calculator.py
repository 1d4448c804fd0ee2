from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional
import structlog

from ..api.models.budget_models import BudgetLineItem, BudgetTotals

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
MONEY_QUANTUM = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Coerces an optional numeric input to Decimal.
    None, blank strings, unparseable strings, NaN and infinities all resolve to 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return ZERO
        try:
            result = Decimal(stripped)
        except InvalidOperation:
            logger.warn("Unparseable numeric value treated as zero", value=value)
            return ZERO
    else:
        logger.warn("Unsupported numeric type treated as zero", value_type=type(value).__name__)
        return ZERO

    if not result.is_finite():
        return ZERO
    return result


def _field(source: Any, name: str) -> Any:
    # Inputs may be ORM rows, pydantic models or plain dicts (JSON columns).
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class BudgetCalculator:
    """
    Computes a budget's subtotal, service fee and total from a surgery request
    and a budget record. Pure: no I/O and no mutation of its inputs.
    """

    def __init__(self, service_fee_rate: Any):
        self.service_fee_rate = to_decimal(service_fee_rate)

    def calculate(self, surgery_request: Any, budget: Any) -> BudgetTotals:
        line_items: List[BudgetLineItem] = []

        # Accommodation
        if bool(_field(surgery_request, "needs_icu")):
            self._add_stay(line_items, "UTI", _field(budget, "icu_daily_cost"), _field(surgery_request, "icu_days"))
        self._add_stay(line_items, "Enfermaria", _field(budget, "ward_daily_cost"), _field(surgery_request, "ward_days"))
        self._add_stay(line_items, "Quarto", _field(budget, "room_daily_cost"), _field(surgery_request, "room_days"))

        # Professional fees; the budget keeps its own copy of the doctor fee
        doctor_fee = _field(budget, "doctor_fee")
        if doctor_fee is None or (isinstance(doctor_fee, str) and not doctor_fee.strip()):
            doctor_fee = _field(surgery_request, "doctor_fee")
        line_items.append(BudgetLineItem(category="fee", description="Honorários médicos", amount=to_decimal(doctor_fee)))
        line_items.append(BudgetLineItem(
            category="fee", description="Honorários do anestesista", amount=to_decimal(_field(budget, "anesthetist_fee"))
        ))
        if bool(_field(surgery_request, "evoked_potential")):
            line_items.append(BudgetLineItem(
                category="fee", description="Potencial evocado", amount=to_decimal(_field(budget, "evoked_potential_fee"))
            ))

        # OPME: only the selected supplier's price counts
        for entry in _field(budget, "opme_quotes") or []:
            line = self._selected_opme_line(entry)
            if line is not None:
                line_items.append(line)

        subtotal = _money(sum((item.amount for item in line_items), ZERO))
        service_fee = _money(subtotal * self.service_fee_rate)
        total = subtotal + service_fee

        logger.debug("Budget total calculated", subtotal=str(subtotal), service_fee=str(service_fee),
                     total=str(total), service_fee_rate=str(self.service_fee_rate))

        return BudgetTotals(
            subtotal=subtotal,
            service_fee=service_fee,
            total=total,
            service_fee_rate=self.service_fee_rate,
            line_items=line_items,
        )

    @staticmethod
    def _add_stay(line_items: List[BudgetLineItem], label: str, daily_cost: Any, days: Any):
        unit_price = to_decimal(daily_cost)
        # Stays are billed in whole days; quantity and amount share the same count.
        day_count = int(to_decimal(days))
        line_items.append(BudgetLineItem(
            category="accommodation",
            description=f"Diárias de {label}",
            quantity=day_count,
            unit_price=unit_price,
            amount=unit_price * day_count,
        ))

    @staticmethod
    def _selected_opme_line(entry: Any) -> Optional[BudgetLineItem]:
        selected_supplier_id = _field(entry, "selected_supplier_id")
        if selected_supplier_id is None or selected_supplier_id == "":
            return None

        quotes: Iterable[Any] = _field(entry, "quotes") or []
        selected = next(
            (quote for quote in quotes if str(_field(quote, "supplier_id")) == str(selected_supplier_id)),
            None,
        )
        if selected is None:
            logger.debug("Selected OPME supplier has no matching quote line",
                         opme_id=_field(entry, "opme_id"), selected_supplier_id=selected_supplier_id)
            return None

        price = to_decimal(_field(selected, "price"))
        description = _field(entry, "description") or _field(entry, "opme_id") or "OPME"
        supplier_name = _field(selected, "supplier_name")
        if supplier_name:
            description = f"{description} ({supplier_name})"
        quantity = _field(entry, "quantity")
        return BudgetLineItem(
            category="opme",
            description=str(description),
            quantity=quantity if isinstance(quantity, int) and not isinstance(quantity, bool) else None,
            unit_price=price,
            amount=price,
        )


def calculate_budget_total(surgery_request: Any, budget: Any, service_fee_rate: Any) -> BudgetTotals:
    return BudgetCalculator(service_fee_rate).calculate(surgery_request, budget)
