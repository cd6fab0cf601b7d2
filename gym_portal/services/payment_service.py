import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from fastapi import HTTPException

from gym_portal.schemas.payment import (
    Payment,
    PaymentCreate,
    PaymentHistorySummary,
    PaymentState,
    PaymentUpdate,
    RenewalRequest,
    RenewalResponse,
)
from gym_portal.schemas.reconciliation import RenewalQuote
from gym_portal.services.api_client import BackendClient, decode
from gym_portal.services.maintenance_fee_service import list_client_fees
from gym_portal.services.plan_service import get_plan
from gym_portal.services.reconciliation_service import (
    completion_state,
    expected_plan_total,
    minimum_renewal_amount,
    round_money,
    should_apply_annual_fee,
)


logger = logging.getLogger(__name__)

RENEWAL_TOO_EARLY = "Cannot renew yet: current enrollment must be within 5 days of expiry"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _payment_date_key(payment: Payment) -> datetime:
    if payment.payment_date is None:
        return _EPOCH
    if payment.payment_date.tzinfo is None:
        return payment.payment_date.replace(tzinfo=timezone.utc)
    return payment.payment_date


def newest_first(payments: Iterable[Payment]) -> List[Payment]:
    return sorted(payments, key=_payment_date_key, reverse=True)


# =====================================================
# HISTORY
# =====================================================

def has_pending_debt(payments: Iterable[Payment]) -> bool:
    return any(payment.state == PaymentState.PENDING for payment in payments)


def latest_payment(payments: Iterable[Payment]) -> Optional[Payment]:
    ordered = newest_first(payments)
    return ordered[0] if ordered else None


def summarize_history(payments: Iterable[Payment]) -> PaymentHistorySummary:
    ordered = newest_first(payments)
    pending = [p for p in ordered if p.state == PaymentState.PENDING]
    completed = [p for p in ordered if p.state == PaymentState.COMPLETED]

    total_paid = sum(
        (round_money(p.amount) for p in ordered if p.state != PaymentState.VOIDED),
        round_money(0),
    )

    return PaymentHistorySummary(
        pending=pending,
        completed=completed,
        total_paid=total_paid,
        latest=ordered[0] if ordered else None,
    )


# =====================================================
# BACKEND CALLS
# =====================================================

def list_payments(api: BackendClient) -> List[Payment]:
    return decode(api.get("/pagos"), List[Payment])


def list_client_payments(api: BackendClient, client_id: int) -> List[Payment]:
    data = api.get(f"/pagos/cliente/{client_id}")
    if not isinstance(data, list):
        return []
    return newest_first(decode(data, List[Payment]))


def get_payment(api: BackendClient, payment_id: int) -> Payment:
    data = api.get(f"/pagos/{payment_id}")
    if not data:
        raise HTTPException(status_code=404, detail="Payment not found")
    return decode(data, Payment)


def create_payment(api: BackendClient, payload: PaymentCreate) -> Payment:
    payment = decode(api.post("/pagos", payload), Payment)
    logger.info("Payment %s created for client %s", payment.id, payload.client_id)
    return payment


def update_payment(api: BackendClient, payment_id: int, payload: PaymentUpdate) -> Payment:
    return decode(api.patch(f"/pagos/{payment_id}", payload), Payment)


def delete_payment(api: BackendClient, payment_id: int) -> bool:
    api.delete(f"/pagos/{payment_id}")
    logger.info("Payment %s deleted", payment_id)
    return True


def renew_plan(api: BackendClient, request: RenewalRequest) -> RenewalResponse:
    try:
        data = api.post("/pagos/renovar", request)
    except HTTPException as exc:
        if exc.status_code == 403:
            raise HTTPException(status_code=403, detail=RENEWAL_TOO_EARLY)
        raise

    response = decode(data, RenewalResponse)
    logger.info(
        "Plan %s renewed for client %s (payment %s)",
        request.plan_id,
        request.client_id,
        response.data.payment.id,
    )
    return response


def complete_payment(api: BackendClient, payment_id: int, notes: Optional[str] = None) -> Payment:
    """Settle a pending payment at its expected total."""
    payment = get_payment(api, payment_id)

    if payment.enrollment is None or payment.enrollment.plan is None:
        raise HTTPException(status_code=400, detail="Payment has no associated plan")

    total = expected_plan_total(payment)
    if not notes:
        notes = (
            f"Pago completado - Monto anterior: {round_money(payment.amount):.2f}, "
            f"Monto final: {total:.2f}"
        )
    note = ". ".join(part for part in (payment.notes, notes) if part)

    payload = PaymentUpdate(
        amount=total,
        state=completion_state(total, payment),
        notes=note,
    )
    return update_payment(api, payment_id, payload)


def quote_renewal(
    api: BackendClient,
    client_id: int,
    plan_id: int,
    now: datetime,
    include_annual_fee: Optional[bool] = None,
) -> RenewalQuote:
    plan = get_plan(api, plan_id)
    fees = list_client_fees(api, client_id)

    if include_annual_fee is None:
        payments = list_client_payments(api, client_id)
        include_annual_fee = should_apply_annual_fee(payments, is_new_client=False, now=now)

    return minimum_renewal_amount(fees, plan, include_annual_fee)
