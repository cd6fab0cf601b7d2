from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from gym_portal.core.dependencies import get_api_client, get_now
from gym_portal.services.api_client import BackendClient
from gym_portal.services.statistics_service import (
    dashboard_or_placeholder,
    full_dashboard,
    health_check,
    month_comparison,
    summary_or_placeholder,
)


router = APIRouter(prefix="/estadisticas", tags=["Statistics"])


@router.get("/dashboard")
def get_dashboard(
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return dashboard_or_placeholder(api, now)


@router.get("/completo")
def get_full_dashboard(
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return full_dashboard(api, now)


@router.get("/resumen")
def get_summary(api: BackendClient = Depends(get_api_client)):
    return summary_or_placeholder(api)


@router.get("/comparativa")
def get_comparison(
    mes1: int = Query(..., ge=0, le=11),
    mes2: int = Query(..., ge=0, le=11),
    anio1: Optional[int] = Query(None),
    anio2: Optional[int] = Query(None),
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return month_comparison(api, mes1, mes2, anio1 or now.year, anio2 or now.year)


@router.get("/health")
def get_health(api: BackendClient = Depends(get_api_client)):
    return {"available": health_check(api)}
