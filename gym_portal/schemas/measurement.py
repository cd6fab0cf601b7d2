from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class MeasurementFields(BaseModel):
    weight: Optional[Decimal] = Field(default=None, alias="peso")
    height: Optional[Decimal] = Field(default=None, alias="altura")
    arms: Optional[Decimal] = Field(default=None, alias="brazos")
    calves: Optional[Decimal] = Field(default=None, alias="pantorrillas")
    neck: Optional[Decimal] = Field(default=None, alias="cuello")
    thighs: Optional[Decimal] = Field(default=None, alias="muslos")
    chest: Optional[Decimal] = Field(default=None, alias="pecho")
    waist: Optional[Decimal] = Field(default=None, alias="cintura")
    glutes: Optional[Decimal] = Field(default=None, alias="gluteo")
    bmi: Optional[Decimal] = Field(default=None, alias="imc")
    weight_category: Optional[str] = Field(default=None, alias="categoriaPeso")

    class Config:
        populate_by_name = True


class Measurement(MeasurementFields):
    id: int = Field(validation_alias=AliasChoices("idMedida", "id"), serialization_alias="idMedida")
    client_id: int = Field(alias="idCliente")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class MeasurementCreate(MeasurementFields):
    client_id: Optional[int] = Field(default=None, alias="idCliente")


class MeasurementUpdate(MeasurementFields):
    pass


class BmiResult(BaseModel):
    bmi: Decimal
    category: str
