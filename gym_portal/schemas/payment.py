from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from gym_portal.schemas.client import ClientRef
from gym_portal.schemas.enrollment import Enrollment


PaymentMethod = Literal["Efectivo", "Transferencia", "Tarjeta"]


class PaymentState(str, Enum):
    COMPLETED = "Completado"
    PENDING = "Pendiente"
    VOIDED = "Anulado"


class FeeSettlement(BaseModel):
    """A maintenance fee bundled into the same payment record."""

    fee_id: Optional[int] = Field(default=None, alias="idCuota")
    year: Optional[int] = Field(default=None, alias="anio")
    amount: Decimal = Field(alias="monto")

    class Config:
        populate_by_name = True


class Payment(BaseModel):
    id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("idPago", "id"),
        serialization_alias="idPago",
    )
    client_id: Optional[int] = Field(default=None, alias="idCliente")
    enrollment_id: Optional[int] = Field(default=None, alias="idInscripcion")
    amount: Decimal = Field(alias="monto")
    payment_date: Optional[datetime] = Field(default=None, alias="fechaPago")
    method: Optional[PaymentMethod] = Field(default=None, alias="metodoPago")
    state: Optional[PaymentState] = Field(default=None, alias="estado")
    reference: Optional[str] = Field(default=None, alias="referencia")
    notes: Optional[str] = Field(default=None, alias="observaciones")
    is_renewal: bool = Field(default=False, alias="esRenovacion")
    includes_annual_fee: bool = Field(default=False, alias="incluyeAnualidad")
    annual_fee_amount: Optional[Decimal] = Field(default=None, alias="montoAnualidad")
    maintenance_fees: List[FeeSettlement] = Field(default_factory=list, alias="cuotasMantenimiento")

    client: Optional[ClientRef] = Field(default=None, alias="cliente")
    enrollment: Optional[Enrollment] = Field(default=None, alias="inscripcion")

    class Config:
        populate_by_name = True


class PaymentCreate(BaseModel):
    client_id: int = Field(alias="idCliente")
    enrollment_id: Optional[int] = Field(default=None, alias="idInscripcion")
    amount: Decimal = Field(alias="monto")
    payment_date: Optional[datetime] = Field(default=None, alias="fechaPago")
    reference: Optional[str] = Field(default=None, alias="referencia")
    notes: Optional[str] = Field(default=None, alias="observaciones")

    class Config:
        populate_by_name = True


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, alias="monto")
    state: Optional[PaymentState] = Field(default=None, alias="estado")
    reference: Optional[str] = Field(default=None, alias="referencia")
    notes: Optional[str] = Field(default=None, alias="observaciones")

    class Config:
        populate_by_name = True


class RenewalRequest(BaseModel):
    client_id: int = Field(alias="idCliente")
    plan_id: int = Field(alias="idPlan")
    amount: Optional[Decimal] = Field(default=None, alias="monto")
    start_date: Optional[date] = Field(default=None, alias="fechaInicio")
    method: Optional[PaymentMethod] = Field(default=None, alias="metodoPago")
    reference: Optional[str] = Field(default=None, alias="referencia")
    notes: Optional[str] = Field(default=None, alias="observaciones")
    includes_annual_fee: bool = Field(default=False, alias="incluyeAnualidad")
    pays_pending_fees: bool = Field(default=False, alias="pagaCuotasPendientes")
    fee_ids: List[int] = Field(default_factory=list, alias="idsCuotas")

    class Config:
        populate_by_name = True


class RenewedPlan(BaseModel):
    id: int = Field(alias="idPlan")
    name: str = Field(alias="nombre")
    duration_months: int = Field(alias="duracionMeses")
    price: Decimal = Field(alias="precio")

    class Config:
        populate_by_name = True


class RenewedPayment(BaseModel):
    id: int = Field(alias="idPago")
    amount: Decimal = Field(alias="monto")
    payment_date: Optional[datetime] = Field(default=None, alias="fechaPago")
    method: Optional[str] = Field(default=None, alias="metodoPago")
    state: PaymentState = Field(alias="estado")

    class Config:
        populate_by_name = True


class RenewalData(BaseModel):
    client: ClientRef = Field(alias="cliente")
    enrollment: Enrollment = Field(alias="inscripcion")
    plan: RenewedPlan
    payment: RenewedPayment = Field(alias="pago")

    class Config:
        populate_by_name = True


class RenewalResponse(BaseModel):
    message: str = Field(alias="mensaje")
    data: RenewalData = Field(alias="datos")

    class Config:
        populate_by_name = True


class PaymentHistorySummary(BaseModel):
    pending: List[Payment]
    completed: List[Payment]
    total_paid: Decimal
    latest: Optional[Payment] = None
