import logging
from datetime import datetime
from typing import List

from fastapi import HTTPException

from gym_portal.schemas.statistics import (
    DashboardSummary,
    FullDashboard,
    MonthComparison,
    MonthlyTrend,
    PlanDistribution,
    WeeklyActivity,
)
from gym_portal.services.api_client import BackendClient, decode


logger = logging.getLogger(__name__)


def _require_object(data, what: str):
    if not isinstance(data, dict):
        logger.error("Invalid %s response: %r", what, data)
        raise HTTPException(status_code=502, detail="Malformed backend response")
    return data


def _require_list(data, what: str):
    if not isinstance(data, list):
        logger.error("Invalid %s response: %r", what, data)
        raise HTTPException(status_code=502, detail="Malformed backend response")
    return data


# =====================================================
# DASHBOARD PIECES
# =====================================================

def dashboard_summary(api: BackendClient) -> DashboardSummary:
    data = _require_object(api.get("/estadisticas/dashboard"), "dashboard")
    return decode(data, DashboardSummary)


def membership_distribution(api: BackendClient) -> List[PlanDistribution]:
    data = _require_list(api.get("/estadisticas/distribucion-membresias"), "distribution")
    return decode(data, List[PlanDistribution])


def monthly_trend(api: BackendClient, year: int) -> MonthlyTrend:
    data = _require_object(
        api.get("/estadisticas/tendencia-clientesingresos", params={"anio": year}),
        "monthly trend",
    )
    if not isinstance(data.get("meses"), list):
        logger.error("Monthly trend response without months: %r", data)
        raise HTTPException(status_code=502, detail="Malformed backend response")
    return decode(data, MonthlyTrend)


def weekly_activity(api: BackendClient, month: int, year: int) -> List[WeeklyActivity]:
    data = _require_list(
        api.get("/estadisticas/actividades-semanales", params={"mes": month, "anio": year}),
        "weekly activity",
    )
    return decode(data, List[WeeklyActivity])


def month_comparison(
    api: BackendClient,
    first_month: int,
    second_month: int,
    first_year: int,
    second_year: int,
) -> MonthComparison:
    data = _require_object(
        api.get(
            "/estadisticas/comparativa-mensual",
            params={
                "mes1": first_month,
                "mes2": second_month,
                "anio1": first_year,
                "anio2": second_year,
            },
        ),
        "month comparison",
    )
    return decode(data, MonthComparison)


def health_check(api: BackendClient) -> bool:
    try:
        api.get("/estadisticas/health-check")
    except HTTPException as exc:
        logger.warning("Statistics API not available: %s", exc.detail)
        return False
    return True


# =====================================================
# FULL DASHBOARD
# =====================================================

def placeholder_dashboard() -> FullDashboard:
    return FullDashboard(
        summary=DashboardSummary(placeholder=True),
        distribution=[],
        trend=MonthlyTrend(),
        activity=[],
        placeholder=True,
    )


def full_dashboard(api: BackendClient, now: datetime) -> FullDashboard:
    """All dashboard pieces; any failure fails the whole dashboard."""
    return FullDashboard(
        summary=dashboard_summary(api),
        distribution=membership_distribution(api),
        trend=monthly_trend(api, now.year),
        # The activity endpoint takes a zero-based month.
        activity=weekly_activity(api, now.month - 1, now.year),
    )


def dashboard_or_placeholder(api: BackendClient, now: datetime) -> FullDashboard:
    try:
        return full_dashboard(api, now)
    except HTTPException as exc:
        logger.warning("Dashboard unavailable, serving placeholder data: %s", exc.detail)
        return placeholder_dashboard()


def summary_or_placeholder(api: BackendClient) -> DashboardSummary:
    try:
        return dashboard_summary(api)
    except HTTPException as exc:
        logger.warning("Dashboard summary unavailable, serving placeholder data: %s", exc.detail)
        return DashboardSummary(placeholder=True)
