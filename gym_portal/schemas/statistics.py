from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class MonthlyComparison(BaseModel):
    previous_month: str = Field(default="Mes Anterior", alias="mesAnterior")
    current_month: str = Field(default="Mes Actual", alias="mesActual")
    change_percent: float = Field(default=0, alias="variacionPorcentaje")

    class Config:
        populate_by_name = True


class DashboardSummary(BaseModel):
    enrolled_this_month: int = Field(default=0, alias="inscritosMes")
    active_clients: int = Field(default=0, alias="clientesActivos")
    monthly_comparison: MonthlyComparison = Field(
        default_factory=MonthlyComparison, alias="comparativaMensual"
    )
    income_this_month: Decimal = Field(default=Decimal("0"), alias="ingresosMes")
    placeholder: bool = False

    class Config:
        populate_by_name = True


class PlanDistribution(BaseModel):
    plan_name: str = Field(default="Plan Desconocido", alias="nombrePlan")
    count: int = Field(default=0, alias="cantidad")
    percent: float = Field(default=0, alias="porcentaje")

    class Config:
        populate_by_name = True


class MonthlyTrend(BaseModel):
    months: List[str] = Field(default_factory=list, alias="meses")
    clients: List[int] = Field(default_factory=list, alias="clientes")
    income: List[Decimal] = Field(default_factory=list, alias="ingresos")

    class Config:
        populate_by_name = True


class WeeklyActivity(BaseModel):
    activity_name: str = Field(default="Actividad Desconocida", alias="nombreActividad")
    week1: int = Field(default=0, alias="semana1")
    week2: int = Field(default=0, alias="semana2")
    week3: int = Field(default=0, alias="semana3")
    week4: int = Field(default=0, alias="semana4")

    class Config:
        populate_by_name = True


class MonthComparison(BaseModel):
    month: str = Field(default="Mes", alias="mes")
    previous_count: int = Field(default=0, alias="cantidadAnterior")
    current_count: int = Field(default=0, alias="cantidadActual")
    change_percent: float = Field(default=0, alias="variacionPorcentaje")

    class Config:
        populate_by_name = True


class FullDashboard(BaseModel):
    summary: DashboardSummary
    distribution: List[PlanDistribution]
    trend: MonthlyTrend
    activity: List[WeeklyActivity]
    placeholder: bool = False
