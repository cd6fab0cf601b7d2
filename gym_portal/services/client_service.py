import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException

from gym_portal.schemas.client import Client, ClientUpdate, RegistrationRequest
from gym_portal.schemas.reconciliation import MembershipState
from gym_portal.services.api_client import BackendClient, decode, to_payload
from gym_portal.services.measurement_service import with_bmi
from gym_portal.services.plan_service import compute_end_date, get_plan
from gym_portal.services.reconciliation_service import membership_status


logger = logging.getLogger(__name__)


def list_clients(api: BackendClient) -> List[Client]:
    return decode(api.get("/clientes"), List[Client])


def get_client(api: BackendClient, client_id: int) -> Client:
    data = api.get(f"/clientes/{client_id}")
    if not data:
        raise HTTPException(status_code=404, detail="Client not found")
    return decode(data, Client)


def get_client_by_national_id(api: BackendClient, national_id: str) -> Optional[Client]:
    try:
        data = api.get(f"/clientes/cedula/{national_id}")
    except HTTPException as exc:
        if exc.status_code == 404:
            return None
        raise
    if not data:
        return None
    return decode(data, Client)


def national_id_exists(api: BackendClient, national_id: str) -> bool:
    data = api.get(f"/clientes/chequeoCI/{national_id}")
    return data is True or data == "true"


def update_client(api: BackendClient, client_id: int, payload: ClientUpdate) -> Client:
    return decode(api.patch(f"/clientes/{client_id}", payload), Client)


def delete_client(api: BackendClient, client_id: int) -> bool:
    api.delete(f"/clientes/{client_id}")
    logger.info("Client %s deleted", client_id)
    return True


def build_registration_payload(request: RegistrationRequest, plan=None) -> dict:
    """Registration body with BMI and enrollment end date filled in."""
    enrollment = request.enrollment
    if enrollment.end_date is None and plan is not None:
        enrollment = enrollment.model_copy(update={
            "end_date": compute_end_date(enrollment.start_date, plan.duration_months),
        })

    data = {
        "cliente": to_payload(request.client),
        "medidas": to_payload(with_bmi(request.measurements)),
        "inscripcion": to_payload(enrollment),
        "pago": to_payload(request.payment),
    }

    if request.maintenance_fee is not None:
        data["cuotaMantenimiento"] = to_payload(request.maintenance_fee)

    return data


def register_client(api: BackendClient, request: RegistrationRequest) -> Client:
    """Create client, first measurement, enrollment and payment in one backend call."""
    plan = get_plan(api, request.enrollment.plan_id)
    data = build_registration_payload(request, plan)

    logger.info("Registering client %s", request.client.national_id)
    return decode(api.post("/clientes/registro", data), Client)


def search_clients(clients: List[Client], term: Optional[str]) -> List[Client]:
    if not term or not term.strip():
        return clients

    needle = term.strip().lower()
    return [
        client for client in clients
        if needle in client.full_name.lower()
        or needle in client.national_id
        or needle in client.phone
    ]


def partition_by_status(clients: List[Client], now: datetime):
    active, inactive = [], []
    for client in clients:
        if membership_status(client, now).state == MembershipState.ACTIVE:
            active.append(client)
        else:
            inactive.append(client)
    return active, inactive
