from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from gym_portal.schemas.client import ClientRef


DEFAULT_FEE_AMOUNT = Decimal("10.00")


class FeeState(str, Enum):
    PENDING = "Pendiente"
    PAID = "Pagada"


class MaintenanceFee(BaseModel):
    id: Optional[int] = Field(default=None, alias="idCuota")
    client_id: int = Field(alias="idCliente")
    year: int = Field(alias="anio")
    amount: Decimal = Field(default=DEFAULT_FEE_AMOUNT, alias="monto")
    state: FeeState = Field(alias="estado")
    due_date: Optional[datetime] = Field(default=None, alias="fechaVencimiento")
    paid_at: Optional[datetime] = Field(default=None, alias="fechaPago")
    payment_id: Optional[int] = Field(default=None, alias="idPago")
    notes: Optional[str] = Field(default=None, alias="observaciones")
    client: Optional[ClientRef] = Field(default=None, alias="cliente")

    class Config:
        populate_by_name = True


class PendingFeesResponse(BaseModel):
    has_pending: bool = Field(alias="tienePendientes")
    count: int = Field(default=0, alias="cantidad")
    fees: List[MaintenanceFee] = Field(default_factory=list, alias="cuotas")

    class Config:
        populate_by_name = True


class FeeCreate(BaseModel):
    client_id: int = Field(alias="idCliente")
    year: int = Field(alias="anio")
    amount: Decimal = Field(default=DEFAULT_FEE_AMOUNT, alias="monto")
    notes: Optional[str] = Field(default=None, alias="observaciones")

    class Config:
        populate_by_name = True


class FeeUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, alias="monto")
    state: Optional[FeeState] = Field(default=None, alias="estado")
    notes: Optional[str] = Field(default=None, alias="observaciones")

    class Config:
        populate_by_name = True


class FeePaymentLink(BaseModel):
    payment_id: int = Field(alias="idPago")

    class Config:
        populate_by_name = True


class FeeSummary(BaseModel):
    pending: List[MaintenanceFee]
    paid: List[MaintenanceFee]
    total_pending: Decimal
    next_due: Optional[MaintenanceFee] = None
