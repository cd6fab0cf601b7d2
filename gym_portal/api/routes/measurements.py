from fastapi import APIRouter, Body, Depends, status

from gym_portal.core.dependencies import get_api_client
from gym_portal.core.errors import ensure_valid, field_errors_exception, parse_body
from gym_portal.schemas.measurement import MeasurementCreate, MeasurementUpdate
from gym_portal.services.api_client import BackendClient
from gym_portal.services.measurement_service import (
    create_measurement,
    delete_measurement,
    get_latest_measurement,
    get_measurement,
    list_client_measurements,
    update_measurement,
)
from gym_portal.services.validation_service import validate_measurements


router = APIRouter(prefix="/medidas", tags=["Measurements"])


@router.get("/cliente/{client_id}")
def get_client_measurements(client_id: int, api: BackendClient = Depends(get_api_client)):
    return list_client_measurements(api, client_id)


@router.get("/cliente/{client_id}/ultima")
def get_latest(client_id: int, api: BackendClient = Depends(get_api_client)):
    return get_latest_measurement(api, client_id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create(payload: dict = Body(...), api: BackendClient = Depends(get_api_client)):
    ensure_valid(validate_measurements(payload))

    measurement = parse_body(MeasurementCreate, payload)
    if measurement.client_id is None:
        raise field_errors_exception({"idCliente": "Client id is required"})

    created = create_measurement(api, measurement)
    return {
        "measurement": created,
        "history": list_client_measurements(api, measurement.client_id),
    }


@router.patch("/{measurement_id}")
def edit(
    measurement_id: int,
    payload: dict = Body(...),
    api: BackendClient = Depends(get_api_client),
):
    existing = get_measurement(api, measurement_id)
    current = existing.model_dump(by_alias=True, mode="json")
    ensure_valid(validate_measurements({**current, **payload}))

    update_measurement(api, measurement_id, parse_body(MeasurementUpdate, payload))
    return get_measurement(api, measurement_id)


@router.delete("/{measurement_id}")
def remove(measurement_id: int, api: BackendClient = Depends(get_api_client)):
    delete_measurement(api, measurement_id)
    return {"message": "Measurement deleted successfully"}
