import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from fastapi import HTTPException

from gym_portal.schemas.maintenance_fee import (
    DEFAULT_FEE_AMOUNT,
    FeeCreate,
    FeeState,
    FeeSummary,
    FeeUpdate,
    MaintenanceFee,
    PendingFeesResponse,
)
from gym_portal.services.api_client import BackendClient, decode
from gym_portal.services.reconciliation_service import minimum_renewal_amount, pending_fee_total


logger = logging.getLogger(__name__)


# =====================================================
# AGGREGATION
# =====================================================

def summarize_fees(fees: Iterable[MaintenanceFee]) -> FeeSummary:
    fees = list(fees)
    pending = sorted(
        (fee for fee in fees if fee.state == FeeState.PENDING),
        key=lambda fee: (fee.year, fee.id or 0),
    )
    paid = sorted(
        (fee for fee in fees if fee.state == FeeState.PAID),
        key=lambda fee: fee.year,
        reverse=True,
    )

    return FeeSummary(
        pending=pending,
        paid=paid,
        total_pending=pending_fee_total(pending),
        next_due=pending[0] if pending else None,
    )


def requires_new_fee_for_year(fees: Iterable[MaintenanceFee], year: int) -> bool:
    return not any(fee.year == year for fee in fees)


def next_overdue_fee(fees: Iterable[MaintenanceFee], now: datetime) -> Optional[MaintenanceFee]:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    overdue = []
    for fee in fees:
        if fee.state != FeeState.PENDING or fee.due_date is None:
            continue
        due = fee.due_date if fee.due_date.tzinfo else fee.due_date.replace(tzinfo=timezone.utc)
        if due < now:
            overdue.append((due, fee))

    if not overdue:
        return None
    return min(overdue, key=lambda item: item[0])[1]


def describe_fee(fee: MaintenanceFee) -> str:
    return f"Cuota {fee.year} - ${fee.amount:.2f} ({fee.state.value})"


def renewal_restriction_message(fees: Iterable[MaintenanceFee], plan, include_annual_fee: bool) -> str:
    fees = list(fees)
    quote = minimum_renewal_amount(fees, plan, include_annual_fee)
    pending_count = sum(1 for fee in fees if fee.state == FeeState.PENDING)

    if not pending_count:
        return f"Minimum amount: ${quote.minimum:.2f}"

    plural = "s" if pending_count > 1 else ""
    annual = " + annual fee" if include_annual_fee else ""
    return (
        f"Minimum payment ${quote.minimum:.2f} "
        f"(plan + {pending_count} pending fee{plural}{annual})"
    )


# =====================================================
# BACKEND CALLS
# =====================================================

def list_client_fees(api: BackendClient, client_id: int) -> List[MaintenanceFee]:
    data = api.get(f"/cuotas-mantenimiento/cliente/{client_id}")
    if not isinstance(data, list):
        return []
    return decode(data, List[MaintenanceFee])


def get_pending_status(api: BackendClient, client_id: int) -> PendingFeesResponse:
    data = api.get(f"/cuotas-mantenimiento/cliente/{client_id}/tiene-pendientes")
    return decode(data, PendingFeesResponse)


def list_pending_fees(api: BackendClient, client_id: int) -> List[MaintenanceFee]:
    return [
        fee for fee in list_client_fees(api, client_id)
        if fee.state == FeeState.PENDING
    ]


def create_fee(api: BackendClient, payload: FeeCreate) -> MaintenanceFee:
    existing = list_client_fees(api, payload.client_id)
    if not requires_new_fee_for_year(existing, payload.year):
        raise HTTPException(
            status_code=409,
            detail=f"A maintenance fee for {payload.year} already exists",
        )

    fee = decode(api.post("/cuotas-mantenimiento", payload), MaintenanceFee)
    logger.info("Maintenance fee %s created for client %s", payload.year, payload.client_id)
    return fee


def ensure_fee_for_year(api: BackendClient, client_id: int, year: int) -> MaintenanceFee:
    """Return the client's fee for ``year``, asking the backend to create it only if absent."""
    fees = list_client_fees(api, client_id)
    for fee in fees:
        if fee.year == year:
            return fee

    payload = FeeCreate(
        client_id=client_id,
        year=year,
        amount=DEFAULT_FEE_AMOUNT,
        notes="Cuota creada automáticamente",
    )
    fee = decode(api.post("/cuotas-mantenimiento", payload), MaintenanceFee)
    logger.info("Annual maintenance fee %s created for client %s", year, client_id)
    return fee


def mark_fee_paid(api: BackendClient, fee_id: int, payment_id: int, now: datetime) -> MaintenanceFee:
    data = api.patch(
        f"/cuotas-mantenimiento/{fee_id}/pagar",
        {
            "idPago": payment_id,
            "estado": FeeState.PAID.value,
            "fechaPago": now.isoformat(),
        },
    )
    return decode(data, MaintenanceFee)


def update_fee(api: BackendClient, fee_id: int, payload: FeeUpdate) -> MaintenanceFee:
    return decode(api.patch(f"/cuotas-mantenimiento/{fee_id}", payload), MaintenanceFee)


def delete_fee(api: BackendClient, fee_id: int) -> bool:
    try:
        api.delete(f"/cuotas-mantenimiento/{fee_id}")
    except HTTPException as exc:
        if exc.status_code == 403:
            raise HTTPException(status_code=403, detail="This fee is already paid and cannot be deleted")
        if exc.status_code == 404:
            raise HTTPException(status_code=404, detail="Maintenance fee not found")
        raise

    logger.info("Maintenance fee %s deleted", fee_id)
    return True
