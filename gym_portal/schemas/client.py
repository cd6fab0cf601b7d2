from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from gym_portal.schemas.enrollment import Enrollment, EnrollmentCreate
from gym_portal.schemas.measurement import Measurement, MeasurementCreate
from gym_portal.schemas.plan import Occupation


class ClientBase(BaseModel):
    first_name: str = Field(alias="nombre")
    last_name: str = Field(alias="apellido")
    national_id: str = Field(alias="cedula")
    phone: str = Field(alias="celular")
    address: str = Field(alias="direccion")
    city: str = Field(alias="ciudad")
    country: str = Field(alias="pais")
    email: str = Field(alias="correo")
    occupation: Occupation = Field(alias="ocupacion")
    job_title: Optional[str] = Field(default=None, alias="puestoTrabajo")
    birth_date: Optional[datetime] = Field(default=None, alias="fechaNacimiento")

    class Config:
        populate_by_name = True


class Client(ClientBase):
    id: int = Field(alias="idCliente")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    enrollments: List[Enrollment] = Field(default_factory=list, alias="inscripciones")
    measurements: List[Measurement] = Field(default_factory=list, alias="medidas")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ClientCreate(ClientBase):
    email: EmailStr = Field(alias="correo")


class ClientUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, alias="nombre")
    last_name: Optional[str] = Field(default=None, alias="apellido")
    national_id: Optional[str] = Field(default=None, alias="cedula")
    phone: Optional[str] = Field(default=None, alias="celular")
    address: Optional[str] = Field(default=None, alias="direccion")
    city: Optional[str] = Field(default=None, alias="ciudad")
    country: Optional[str] = Field(default=None, alias="pais")
    email: Optional[str] = Field(default=None, alias="correo")
    occupation: Optional[Occupation] = Field(default=None, alias="ocupacion")
    job_title: Optional[str] = Field(default=None, alias="puestoTrabajo")
    birth_date: Optional[datetime] = Field(default=None, alias="fechaNacimiento")

    class Config:
        populate_by_name = True


class ClientRef(BaseModel):
    id: int = Field(alias="idCliente")
    first_name: Optional[str] = Field(default=None, alias="nombre")
    last_name: Optional[str] = Field(default=None, alias="apellido")
    national_id: Optional[str] = Field(default=None, alias="cedula")
    phone: Optional[str] = Field(default=None, alias="celular")

    class Config:
        populate_by_name = True


class RegistrationPayment(BaseModel):
    amount: Decimal = Field(alias="monto", ge=0)
    reference: Optional[str] = Field(default=None, alias="referencia")
    notes: Optional[str] = Field(default=None, alias="observaciones")

    class Config:
        populate_by_name = True


class RegistrationFee(BaseModel):
    pay_now: bool = Field(alias="pagarAhora")
    notes: Optional[str] = Field(default=None, alias="observaciones")

    class Config:
        populate_by_name = True


class RegistrationRequest(BaseModel):
    client: ClientCreate = Field(alias="cliente")
    measurements: MeasurementCreate = Field(alias="medidas")
    enrollment: EnrollmentCreate = Field(alias="inscripcion")
    payment: RegistrationPayment = Field(alias="pago")
    maintenance_fee: Optional[RegistrationFee] = Field(default=None, alias="cuotaMantenimiento")

    class Config:
        populate_by_name = True
