from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from gym_portal.schemas.plan import Plan


class Enrollment(BaseModel):
    id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("idInscripcion", "id"),
        serialization_alias="idInscripcion",
    )
    client_id: Optional[int] = Field(default=None, alias="idCliente")
    plan_id: Optional[int] = Field(default=None, alias="idPlan")
    start_date: Optional[datetime] = Field(default=None, alias="fechaInicio")
    end_date: Optional[datetime] = Field(default=None, alias="fechaFin")
    plan: Optional[Plan] = None

    class Config:
        populate_by_name = True


class EnrollmentCreate(BaseModel):
    plan_id: int = Field(alias="idPlan")
    start_date: datetime = Field(alias="fechaInicio")
    end_date: Optional[datetime] = Field(default=None, alias="fechaFin")

    class Config:
        populate_by_name = True
