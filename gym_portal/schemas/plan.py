from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Occupation(str, Enum):
    WORKER = "Trabajo"
    STUDENT = "Estudiante"
    CHILD = "Niño"


class Plan(BaseModel):
    id: int = Field(alias="idPlan")
    name: str = Field(alias="nombre")
    duration_months: int = Field(alias="duracionMeses")
    price: Decimal = Field(alias="precio")
    description: Optional[str] = Field(default=None, alias="descripcion")
    tag: Optional[Occupation] = None

    class Config:
        populate_by_name = True
        frozen = True
