from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from gym_portal.core.dependencies import get_api_client, get_now
from gym_portal.core.errors import ensure_valid, field_errors_exception, parse_body
from gym_portal.schemas.maintenance_fee import FeeState
from gym_portal.schemas.payment import PaymentState, PaymentUpdate, RenewalRequest
from gym_portal.services.api_client import BackendClient
from gym_portal.services.maintenance_fee_service import list_client_fees
from gym_portal.services.membership_service import build_client_detail
from gym_portal.services.payment_service import (
    complete_payment,
    delete_payment,
    get_payment,
    list_client_payments,
    quote_renewal,
    renew_plan,
    update_payment,
)
from gym_portal.services.plan_service import list_plans
from gym_portal.services.reconciliation_service import (
    completion_state,
    expected_plan_total,
    minimum_renewal_amount,
    payment_balance,
    round_money,
)
from gym_portal.services.validation_service import validate_payment_edit, validate_renewal_payment


router = APIRouter(prefix="/pagos", tags=["Payments"])


@router.get("/cliente/{client_id}")
def get_client_payments(client_id: int, api: BackendClient = Depends(get_api_client)):
    return list_client_payments(api, client_id)


@router.get("/renovacion/{client_id}/cotizacion")
def get_renewal_quote(
    client_id: int,
    plan_id: int = Query(..., alias="idPlan"),
    include_annual_fee: Optional[bool] = Query(None, alias="incluyeAnualidad"),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return quote_renewal(api, client_id, plan_id, now, include_annual_fee)


@router.post("/renovar")
def renew(
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    try:
        client_id = int(payload.get("idCliente"))
    except (TypeError, ValueError):
        raise field_errors_exception({"idCliente": "Client id is required"})

    plans = list_plans(api)
    fees = list_client_fees(api, client_id)
    ensure_valid(validate_renewal_payment(payload, plans, fees))

    request = parse_body(RenewalRequest, payload)

    # Pending fees are always part of the minimum, so they are settled here too.
    pending_ids = [fee.id for fee in fees if fee.state == FeeState.PENDING and fee.id is not None]
    foreign = sorted(set(request.fee_ids) - set(pending_ids))
    if foreign:
        raise field_errors_exception(
            {"idsCuotas": f"Fees {foreign} are not pending fees of this client"}
        )

    updates = {}
    if pending_ids:
        updates["pays_pending_fees"] = True
        updates["fee_ids"] = pending_ids
    if request.amount is None:
        plan = next(p for p in plans if p.id == request.plan_id)
        updates["amount"] = minimum_renewal_amount(fees, plan, request.includes_annual_fee).minimum
    if request.start_date is None:
        updates["start_date"] = now.date()
    if updates:
        request = request.model_copy(update=updates)

    response = renew_plan(api, request)

    return {
        "message": response.message,
        "renewal": response,
        "client": build_client_detail(api, client_id, now),
    }


@router.get("/{payment_id}")
def get_one(payment_id: int, api: BackendClient = Depends(get_api_client)):
    return get_payment(api, payment_id)


@router.get("/{payment_id}/saldo")
def get_balance(payment_id: int, api: BackendClient = Depends(get_api_client)):
    return payment_balance(get_payment(api, payment_id))


@router.post("/{payment_id}/completar")
def complete(
    payment_id: int,
    payload: Optional[dict] = Body(default=None),
    api: BackendClient = Depends(get_api_client),
):
    notes = (payload or {}).get("observaciones")
    complete_payment(api, payment_id, notes)
    return get_payment(api, payment_id)


@router.patch("/{payment_id}")
def edit(
    payment_id: int,
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
):
    existing = get_payment(api, payment_id)
    maximum = expected_plan_total(existing) or round_money(existing.amount)

    values = {"monto": existing.amount, **payload}
    ensure_valid(validate_payment_edit(values, maximum))

    changes = parse_body(PaymentUpdate, payload)
    has_plan = existing.enrollment is not None and existing.enrollment.plan is not None
    voided = changes.state == PaymentState.VOIDED or (
        changes.state is None and existing.state == PaymentState.VOIDED
    )
    # Completed and Pending always follow the amount; only voiding comes from the caller.
    if has_plan and not voided:
        amount = changes.amount if changes.amount is not None else existing.amount
        changes = changes.model_copy(update={"state": completion_state(amount, existing)})

    update_payment(api, payment_id, changes)
    return get_payment(api, payment_id)


@router.delete("/{payment_id}")
def remove(payment_id: int, api: BackendClient = Depends(get_api_client)):
    delete_payment(api, payment_id)
    return {"message": "Payment deleted successfully"}
