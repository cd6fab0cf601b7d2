from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from gym_portal.core.dependencies import get_api_client, get_now
from gym_portal.core.errors import ensure_valid, parse_body
from gym_portal.schemas.maintenance_fee import FeeCreate, FeePaymentLink, FeeUpdate
from gym_portal.services.api_client import BackendClient
from gym_portal.services.maintenance_fee_service import (
    create_fee,
    delete_fee,
    ensure_fee_for_year,
    get_pending_status,
    list_client_fees,
    mark_fee_paid,
    summarize_fees,
    update_fee,
)
from gym_portal.services.validation_service import validate_fee_create, validate_fee_update


router = APIRouter(prefix="/cuotas-mantenimiento", tags=["Maintenance Fees"])


def _refreshed(api: BackendClient, fee):
    return {
        "fee": fee,
        "summary": summarize_fees(list_client_fees(api, fee.client_id)),
    }


@router.get("/cliente/{client_id}")
def get_client_fees(client_id: int, api: BackendClient = Depends(get_api_client)):
    return list_client_fees(api, client_id)


@router.get("/cliente/{client_id}/resumen")
def get_fee_summary(client_id: int, api: BackendClient = Depends(get_api_client)):
    return summarize_fees(list_client_fees(api, client_id))


@router.get("/cliente/{client_id}/pendientes")
def get_pending(client_id: int, api: BackendClient = Depends(get_api_client)):
    return get_pending_status(api, client_id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create(
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    ensure_valid(validate_fee_create(payload, now.year))
    fee = create_fee(api, parse_body(FeeCreate, payload))
    return _refreshed(api, fee)


@router.post("/cliente/{client_id}/anual")
def ensure_annual(
    client_id: int,
    year: Optional[int] = Query(None, alias="anio"),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    fee = ensure_fee_for_year(api, client_id, year or now.year)
    return _refreshed(api, fee)


@router.patch("/{fee_id}/pagar")
def pay(
    fee_id: int,
    link: FeePaymentLink,
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    fee = mark_fee_paid(api, fee_id, link.payment_id, now)
    return _refreshed(api, fee)


@router.patch("/{fee_id}")
def edit(
    fee_id: int,
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
):
    ensure_valid(validate_fee_update(payload))
    fee = update_fee(api, fee_id, parse_body(FeeUpdate, payload))
    return _refreshed(api, fee)


@router.delete("/{fee_id}")
def remove(fee_id: int, api: BackendClient = Depends(get_api_client)):
    delete_fee(api, fee_id)
    return {"message": "Maintenance fee deleted successfully"}
