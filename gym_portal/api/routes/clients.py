from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from gym_portal.core.dependencies import get_api_client, get_now
from gym_portal.core.errors import ensure_valid, parse_body
from gym_portal.schemas.client import ClientUpdate, RegistrationRequest
from gym_portal.services.api_client import BackendClient
from gym_portal.services.client_service import (
    delete_client,
    get_client,
    get_client_by_national_id,
    list_clients,
    national_id_exists,
    partition_by_status,
    register_client,
    search_clients,
    update_client,
)
from gym_portal.services.membership_service import build_client_detail, client_summary
from gym_portal.services.validation_service import validate_client_details, validate_registration


router = APIRouter(prefix="/clientes", tags=["Clients"])


def _registration_form_values(payload: dict) -> dict:
    # The registration form validates as one flat set of fields.
    values = {}
    for section in ("cliente", "medidas", "inscripcion", "pago"):
        part = payload.get(section)
        if isinstance(part, dict):
            values.update(part)
    return values


@router.get("")
def get_clients(
    q: Optional[str] = Query(None),
    estado: Optional[str] = Query(None, pattern="^(activos|inactivos)$"),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    clients = search_clients(list_clients(api), q)

    if estado:
        active, inactive = partition_by_status(clients, now)
        return active if estado == "activos" else inactive

    return clients


@router.post("/registro", status_code=status.HTTP_201_CREATED)
def register(
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    ensure_valid(validate_registration(_registration_form_values(payload), now.date()))

    request = parse_body(RegistrationRequest, payload)

    if national_id_exists(api, request.client.national_id):
        raise HTTPException(
            status_code=409,
            detail="A client with this national ID already exists",
        )

    client = register_client(api, request)
    return build_client_detail(api, client.id, now)


@router.get("/cedula/{cedula}")
def get_by_national_id(cedula: str, api: BackendClient = Depends(get_api_client)):
    client = get_client_by_national_id(api, cedula)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("/chequeo-ci/{cedula}")
def check_national_id(cedula: str, api: BackendClient = Depends(get_api_client)):
    return {"cedula": cedula, "exists": national_id_exists(api, cedula)}


@router.get("/{client_id}")
def get_one(client_id: int, api: BackendClient = Depends(get_api_client)):
    return get_client(api, client_id)


@router.patch("/{client_id}")
def edit(
    client_id: int,
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
):
    existing = get_client(api, client_id)
    current = existing.model_dump(by_alias=True, mode="json")
    ensure_valid(validate_client_details({**current, **payload}, require_plan=False))

    changes = parse_body(ClientUpdate, payload)
    update_client(api, client_id, changes)

    return get_client(api, client_id)


@router.delete("/{client_id}")
def remove(client_id: int, api: BackendClient = Depends(get_api_client)):
    delete_client(api, client_id)
    return {"message": "Client deleted successfully"}


@router.get("/{client_id}/detalle")
def detail(
    client_id: int,
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return build_client_detail(api, client_id, now)


@router.get("/{client_id}/membresia")
def membership(
    client_id: int,
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return client_summary(get_client(api, client_id), now)
