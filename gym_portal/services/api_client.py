import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Type, TypeVar

import requests
from fastapi import HTTPException
from pydantic import BaseModel, TypeAdapter, ValidationError

from gym_portal.core.config import settings


logger = logging.getLogger(__name__)

T = TypeVar("T")


# Identifiers and free text that may look numeric but must stay strings.
TEXT_FIELDS = {
    "cedula",
    "celular",
    "nombre",
    "apellido",
    "direccion",
    "referencia",
    "observaciones",
    "puestoTrabajo",
    "phoneNumber",
    "message",
    "mensaje",
    "ciudad",
    "pais",
    "correo",
    "descripcion",
    "nombrePlan",
    "nombreActividad",
    "mes",
    "mesAnterior",
    "mesActual",
    "meses",
}


def parse_numeric_strings(value: Any) -> Any:
    """Recursively turn numeric-looking strings into ints or floats."""
    if isinstance(value, list):
        return [parse_numeric_strings(item) for item in value]

    if isinstance(value, dict):
        return {
            key: item if key in TEXT_FIELDS else parse_numeric_strings(item)
            for key, item in value.items()
        }

    if isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return value

        if number != number or number in (float("inf"), float("-inf")):
            return value

        if number.is_integer():
            return int(number)
        return number

    return value


def _json_default(value: Any):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_payload(model: BaseModel) -> dict:
    return model.model_dump(by_alias=True, exclude_none=True)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or "Backend error"

    if isinstance(body, dict):
        message = body.get("message") or body.get("mensaje") or body.get("error")
        if isinstance(message, list):
            return "; ".join(str(item) for item in message)
        if message:
            return str(message)
    return response.reason or "Backend error"


class BackendClient:
    """Thin JSON client for the gym REST backend.

    Every response body goes through ``parse_numeric_strings`` before it is
    decoded into a schema. Backend 4xx/5xx answers become ``HTTPException``
    with the backend's status and message; connection problems become 502.
    Calls are never retried.
    """

    def __init__(
        self,
        base_url: str = settings.API_URL,
        access_token: Optional[str] = None,
        timeout: float = settings.API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if access_token:
            self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    def close(self):
        self.session.close()

    def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        data = None
        if payload is not None:
            if isinstance(payload, BaseModel):
                payload = to_payload(payload)
            data = json.dumps(payload, default=_json_default)

        try:
            response = self.session.request(
                method,
                url,
                data=data,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("API Error: %s %s failed: %s", method, path, exc)
            raise HTTPException(status_code=502, detail="Backend unavailable")

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error("API Error: %s %s -> %s %s", method, path, response.status_code, message)
            status_code = response.status_code if response.status_code < 500 else 502
            raise HTTPException(status_code=status_code, detail=message)

        if not response.content:
            return None

        try:
            body = response.json()
        except ValueError:
            logger.error("API Error: %s %s returned a non-JSON body", method, path)
            raise HTTPException(status_code=502, detail="Malformed backend response")

        return parse_numeric_strings(body)

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Any = None) -> Any:
        return self.request("POST", path, payload=payload)

    def patch(self, path: str, payload: Any = None) -> Any:
        return self.request("PATCH", path, payload=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def decode(data: Any, schema: Type[T]) -> T:
    """Validate a backend payload into ``schema`` (a model or a typing form)."""
    try:
        return TypeAdapter(schema).validate_python(data)
    except ValidationError as exc:
        logger.error("Malformed backend response for %s: %s", schema, exc)
        raise HTTPException(status_code=502, detail="Malformed backend response")
