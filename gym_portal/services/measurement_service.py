import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from gym_portal.schemas.measurement import (
    BmiResult,
    Measurement,
    MeasurementCreate,
    MeasurementFields,
    MeasurementUpdate,
)
from gym_portal.services.api_client import BackendClient, decode


logger = logging.getLogger(__name__)


def calculate_bmi(weight, height) -> Optional[BmiResult]:
    if not weight or not height:
        return None

    weight = Decimal(str(weight))
    height = Decimal(str(height))

    # Heights above 3 are taken as centimetres.
    height_m = height / 100 if height > 3 else height
    bmi = weight / (height_m * height_m)

    if bmi < Decimal("18.5"):
        category = "Bajo peso"
    elif bmi < 25:
        category = "Normal"
    elif bmi < 30:
        category = "Sobrepeso"
    else:
        category = "Obesidad"

    return BmiResult(
        bmi=bmi.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        category=category,
    )


def with_bmi(fields: MeasurementFields, weight=None, height=None) -> MeasurementFields:
    """Fill BMI and weight category from weight/height when they are missing."""
    if fields.bmi is not None and fields.weight_category:
        return fields

    result = calculate_bmi(weight or fields.weight, height or fields.height)
    if result is None:
        return fields

    return fields.model_copy(update={
        "bmi": fields.bmi if fields.bmi is not None else result.bmi,
        "weight_category": fields.weight_category or result.category,
    })


def list_measurements(api: BackendClient) -> List[Measurement]:
    return decode(api.get("/medidas"), List[Measurement])


def get_measurement(api: BackendClient, measurement_id: int) -> Measurement:
    return decode(api.get(f"/medidas/{measurement_id}"), Measurement)


def list_client_measurements(api: BackendClient, client_id: int) -> List[Measurement]:
    data = api.get(f"/medidas/cliente/{client_id}")
    if not isinstance(data, list):
        return []
    return decode(data, List[Measurement])


def get_latest_measurement(api: BackendClient, client_id: int) -> Optional[Measurement]:
    data = api.get(f"/medidas/cliente/{client_id}/ultima")
    if not data:
        return None
    return decode(data, Measurement)


def create_measurement(api: BackendClient, payload: MeasurementCreate) -> Measurement:
    payload = with_bmi(payload)
    return decode(api.post("/medidas", payload), Measurement)


def update_measurement(
    api: BackendClient,
    measurement_id: int,
    payload: MeasurementUpdate,
) -> Measurement:
    if payload.weight is not None or payload.height is not None:
        existing = get_measurement(api, measurement_id)
        payload = with_bmi(
            payload.model_copy(update={"bmi": None, "weight_category": None}),
            weight=payload.weight or existing.weight,
            height=payload.height or existing.height,
        )

    return decode(api.patch(f"/medidas/{measurement_id}", payload), Measurement)


def delete_measurement(api: BackendClient, measurement_id: int) -> bool:
    api.delete(f"/medidas/{measurement_id}")
    logger.info("Measurement %s deleted", measurement_id)
    return True
