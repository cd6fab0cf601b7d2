"""
Form validation for the portal's forms.

Every validator is a pure function over the submitted values that returns a
``ValidationResult``; nothing raises for invalid input. Field keys are the
form/wire field names (``nombre``, ``monto``, ...), so routes can hand the
errors back to the browser as-is.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Mapping, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from gym_portal.schemas.maintenance_fee import FeeState, MaintenanceFee
from gym_portal.schemas.plan import Occupation, Plan
from gym_portal.services.reconciliation_service import ANNUAL_FEE_AMOUNT, minimum_renewal_amount


MAX_NOTES_LENGTH = 150
MIN_ID_LENGTH = 10
MIN_FEE_YEAR = 2020
MAX_FEE_AMOUNT = Decimal("100")

_CIRCUMFERENCE_LIMITS = {
    "brazos": 200,
    "pantorrillas": 200,
    "gluteo": 200,
    "muslos": 200,
    "pecho": 200,
    "cintura": 200,
    "cuello": 100,
}


class ValidationResult(BaseModel):
    valid: bool
    field_errors: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_errors(cls, errors: Mapping[str, str]) -> "ValidationResult":
        return cls(valid=not errors, field_errors=dict(errors))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        errors = {**self.field_errors, **other.field_errors}
        return ValidationResult.from_errors(errors)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


_FLAG = TypeAdapter(bool)


def _check_flag(values: Mapping, key: str, errors: Dict[str, str]) -> bool:
    raw = values.get(key)
    if _blank(raw):
        return False
    try:
        return _FLAG.validate_python(raw)
    except ValidationError:
        errors[key] = "Must be true or false"
        return False


def _to_decimal(value) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _has_two_decimals_at_most(number: Decimal) -> bool:
    return number.normalize().as_tuple().exponent >= -2


def _to_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _check_notes(values: Mapping, errors: Dict[str, str]):
    notes = values.get("observaciones")
    if notes and len(notes) > MAX_NOTES_LENGTH:
        errors["observaciones"] = f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"


def _check_amount(values: Mapping, errors: Dict[str, str], minimum: Decimal, required: bool) -> Optional[Decimal]:
    raw = values.get("monto")
    if _blank(raw):
        if required:
            errors["monto"] = "Amount is required"
        return None

    amount = _to_decimal(raw)
    if amount is None:
        errors["monto"] = "Amount must be a valid number"
        return None
    if amount < minimum:
        errors["monto"] = f"Amount must be at least ${minimum:.2f}"
        return None
    if not _has_two_decimals_at_most(amount):
        errors["monto"] = "Only up to 2 decimal places are allowed"
        return None
    return amount


# =====================================================
# CLIENT REGISTRATION
# =====================================================

def validate_client_details(values: Mapping, require_plan: bool = True) -> ValidationResult:
    errors: Dict[str, str] = {}

    required = {
        "nombre": "First name is required",
        "apellido": "Last name is required",
        "ciudad": "City is required",
        "pais": "Country is required",
        "direccion": "Address is required",
        "fechaNacimiento": "Birth date is required",
    }
    for field, message in required.items():
        if _blank(values.get(field)):
            errors[field] = message

    for field, label in (("cedula", "National ID"), ("celular", "Phone")):
        value = values.get(field)
        if _blank(value):
            errors[field] = f"{label} is required"
        elif len(str(value).strip()) < MIN_ID_LENGTH:
            errors[field] = f"{label} must have at least {MIN_ID_LENGTH} digits"

    if not _blank(values.get("fechaNacimiento")) and _to_date(values.get("fechaNacimiento")) is None:
        errors["fechaNacimiento"] = "Birth date is not valid"

    email = values.get("correo")
    if _blank(email):
        errors["correo"] = "Email is required"
    else:
        try:
            validate_email(str(email), check_deliverability=False)
        except EmailNotValidError:
            errors["correo"] = "Email is not valid"

    occupation = values.get("ocupacion")
    occupations = {item.value for item in Occupation}
    if _blank(occupation):
        errors["ocupacion"] = "Occupation is required"
    elif getattr(occupation, "value", occupation) not in occupations:
        errors["ocupacion"] = "Occupation is not valid"
    elif getattr(occupation, "value", occupation) == Occupation.WORKER.value and _blank(values.get("puestoTrabajo")):
        errors["puestoTrabajo"] = "Job title is required for workers"

    if require_plan and _blank(values.get("idPlan")):
        errors["idPlan"] = "A plan must be selected"

    return ValidationResult.from_errors(errors)


def validate_measurements(values: Mapping) -> ValidationResult:
    errors: Dict[str, str] = {}

    for field, label, low, high, unit in (
        ("peso", "Weight", 1, 300, "kg"),
        ("altura", "Height", 30, 250, "cm"),
    ):
        raw = values.get(field)
        if _blank(raw):
            errors[field] = f"{label} is required"
            continue
        number = _to_decimal(raw)
        if number is None:
            errors[field] = f"{label} must be a number"
        elif number < low:
            errors[field] = f"{label} must be at least {low}{unit}"
        elif number > high:
            errors[field] = f"{label} must be at most {high}{unit}"

    for field, high in _CIRCUMFERENCE_LIMITS.items():
        raw = values.get(field)
        if _blank(raw):
            continue
        number = _to_decimal(raw)
        if number is None or number < 1 or number > high:
            errors[field] = f"Must be a number between 1 and {high}"

    return ValidationResult.from_errors(errors)


def validate_enrollment_payment(values: Mapping, today: date) -> ValidationResult:
    errors: Dict[str, str] = {}

    raw_start = values.get("fechaInicio")
    if _blank(raw_start):
        errors["fechaInicio"] = "Start date is required"
    else:
        start = _to_date(raw_start)
        if start is None:
            errors["fechaInicio"] = "Start date is not valid"
        elif start < today:
            errors["fechaInicio"] = "Start date cannot be before today"

    _check_amount(values, errors, minimum=Decimal("0"), required=False)
    _check_notes(values, errors)

    return ValidationResult.from_errors(errors)


def validate_registration(values: Mapping, today: date) -> ValidationResult:
    return (
        validate_client_details(values)
        .merge(validate_measurements(values))
        .merge(validate_enrollment_payment(values, today))
    )


# =====================================================
# PAYMENTS
# =====================================================

def validate_renewal_payment(
    values: Mapping,
    plans: Iterable[Plan],
    client_fees: Iterable[MaintenanceFee] = (),
    include_annual_fee: Optional[bool] = None,
) -> ValidationResult:
    errors: Dict[str, str] = {}
    client_fees = list(client_fees)

    plan = None
    raw_plan = values.get("idPlan")
    if _blank(raw_plan):
        errors["idPlan"] = "A plan must be selected"
    else:
        try:
            plan_id = int(raw_plan)
        except (TypeError, ValueError):
            plan_id = None
        plan = next((p for p in plans if p.id == plan_id), None)
        if plan is None:
            errors["idPlan"] = "Selected plan does not exist"

    amount = _check_amount(values, errors, minimum=Decimal("1"), required=False)

    flag = _check_flag(values, "incluyeAnualidad", errors)
    if include_annual_fee is None:
        include_annual_fee = flag

    if amount is not None and plan is not None:
        quote = minimum_renewal_amount(client_fees, plan, include_annual_fee)
        has_pending = any(fee.state == FeeState.PENDING for fee in client_fees)
        ceiling = quote.breakdown.plan + ANNUAL_FEE_AMOUNT + quote.breakdown.pending_fees

        if amount > ceiling:
            errors["monto"] = f"Amount cannot exceed ${ceiling:.2f}"
        elif has_pending and amount < quote.minimum:
            errors["monto"] = (
                f"Renewal must include the pending maintenance fees: "
                f"minimum ${quote.minimum:.2f}"
            )

    _check_notes(values, errors)

    return ValidationResult.from_errors(errors)


def validate_payment_edit(values: Mapping, maximum: Decimal) -> ValidationResult:
    errors: Dict[str, str] = {}

    amount = _check_amount(values, errors, minimum=Decimal("1"), required=True)
    if amount is not None and amount > maximum:
        errors["monto"] = f"Amount cannot exceed ${maximum:.2f}"

    _check_notes(values, errors)

    return ValidationResult.from_errors(errors)


# =====================================================
# MAINTENANCE FEES
# =====================================================

def _check_fee_amount(values: Mapping, errors: Dict[str, str]):
    raw = values.get("monto")
    if _blank(raw):
        return
    amount = _to_decimal(raw)
    if amount is None or amount <= 0:
        errors["monto"] = "Amount must be greater than 0"
    elif amount > MAX_FEE_AMOUNT:
        errors["monto"] = f"Amount cannot exceed ${MAX_FEE_AMOUNT}"


def validate_fee_create(values: Mapping, current_year: int) -> ValidationResult:
    errors: Dict[str, str] = {}

    client_id = values.get("idCliente")
    try:
        if client_id is None or int(client_id) <= 0:
            errors["idCliente"] = "Client id is required"
    except (TypeError, ValueError):
        errors["idCliente"] = "Client id is required"

    raw_year = values.get("anio")
    if _blank(raw_year):
        errors["anio"] = "Year is required"
    else:
        try:
            year = int(raw_year)
        except (TypeError, ValueError):
            errors["anio"] = "Year must be a number"
        else:
            if year < MIN_FEE_YEAR:
                errors["anio"] = f"Year must be {MIN_FEE_YEAR} or later"
            elif year > current_year + 1:
                errors["anio"] = "Year cannot be later than next year"

    _check_fee_amount(values, errors)
    _check_notes(values, errors)

    return ValidationResult.from_errors(errors)


def validate_fee_update(values: Mapping) -> ValidationResult:
    errors: Dict[str, str] = {}

    _check_fee_amount(values, errors)

    state = values.get("estado")
    if state is not None:
        state = getattr(state, "value", state)
        if state == FeeState.PAID.value:
            errors["estado"] = "A fee is paid only by linking it to a payment"
        elif state not in {item.value for item in FeeState}:
            errors["estado"] = "State must be Pendiente or Pagada"

    _check_notes(values, errors)

    return ValidationResult.from_errors(errors)
