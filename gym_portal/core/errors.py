from typing import Any, Mapping, Type, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel, ValidationError

from gym_portal.services.validation_service import ValidationResult


M = TypeVar("M", bound=BaseModel)


def field_errors_exception(field_errors: Mapping[str, str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"field_errors": dict(field_errors)},
    )


def ensure_valid(result: ValidationResult) -> None:
    if not result.valid:
        raise field_errors_exception(result.field_errors)


def parse_body(schema: Type[M], payload: Any) -> M:
    """Build ``schema`` from a request body, reporting failures per field."""
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        errors = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            errors.setdefault(field, error["msg"])
        raise field_errors_exception(errors)
