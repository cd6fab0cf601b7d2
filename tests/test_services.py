from datetime import date, datetime
from decimal import Decimal

import pytest
from fastapi import HTTPException

from gym_portal.schemas.measurement import MeasurementCreate, MeasurementUpdate
from gym_portal.schemas.payment import PaymentState, RenewalRequest
from gym_portal.schemas.plan import Occupation
from gym_portal.schemas.reconciliation import MembershipState, RenewalReason
from gym_portal.services.measurement_service import calculate_bmi, create_measurement, update_measurement
from gym_portal.services.membership_service import (
    age_from_birth_date,
    build_client_detail,
    client_summary,
    is_minor,
)
from gym_portal.services.payment_service import (
    RENEWAL_TOO_EARLY,
    complete_payment,
    has_pending_debt,
    latest_payment,
    renew_plan,
    summarize_history,
)
from gym_portal.services.plan_service import compute_end_date, filter_plans_by_occupation
from gym_portal.services.statistics_service import dashboard_or_placeholder, full_dashboard
from gym_portal.services.whatsapp_service import get_status, reset_session

from factories import (
    NOW,
    client_json,
    fee_json,
    make_client,
    make_enrollment,
    make_payment,
    make_plan,
    payment_json,
)


# =====================================================
# PLANS
# =====================================================

@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2025, 1, 31), 1, date(2025, 2, 28)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2025, 11, 15), 3, date(2026, 2, 15)),
        (date(2025, 6, 15), 12, date(2026, 6, 15)),
    ],
)
def test_compute_end_date(start, months, expected):
    assert compute_end_date(start, months) == expected


def test_filter_plans_by_occupation():
    plans = [
        make_plan(1, tag=Occupation.WORKER),
        make_plan(2, tag=Occupation.STUDENT),
        make_plan(3, tag=Occupation.CHILD),
    ]

    assert [p.id for p in filter_plans_by_occupation(plans, "Niño")] == [3]
    assert [p.id for p in filter_plans_by_occupation(plans, Occupation.STUDENT)] == [2]
    assert [p.id for p in filter_plans_by_occupation(plans, "Jubilado")] == [1]
    assert filter_plans_by_occupation([], "Trabajo") == []


# =====================================================
# MEASUREMENTS
# =====================================================

@pytest.mark.parametrize(
    "weight, height, bmi, category",
    [
        (50, 180, Decimal("15.43"), "Bajo peso"),
        (70, 175, Decimal("22.86"), "Normal"),
        (85, 1.75, Decimal("27.76"), "Sobrepeso"),
        (110, 170, Decimal("38.06"), "Obesidad"),
    ],
)
def test_calculate_bmi(weight, height, bmi, category):
    result = calculate_bmi(weight, height)

    assert result.bmi == bmi
    assert result.category == category


def test_bmi_needs_weight_and_height():
    assert calculate_bmi(None, 170) is None
    assert calculate_bmi(70, 0) is None


def test_create_measurement_sends_bmi(backend):
    backend.on("POST", "/medidas", {"idMedida": 1, "idCliente": 1, "peso": 70, "altura": 175})

    create_measurement(backend, MeasurementCreate(client_id=1, weight=Decimal("70"), height=Decimal("175")))

    sent = backend.sent("POST", "/medidas")[0]
    assert sent["imc"] == Decimal("22.86")
    assert sent["categoriaPeso"] == "Normal"


def test_update_measurement_recomputes_bmi_with_stored_height(backend):
    backend.on("GET", "/medidas/4", {"idMedida": 4, "idCliente": 1, "peso": 70, "altura": 175, "imc": 22.86})
    backend.on("PATCH", "/medidas/4", {"idMedida": 4, "idCliente": 1, "peso": 110, "altura": 175})

    update_measurement(backend, 4, MeasurementUpdate(weight=Decimal("110")))

    sent = backend.sent("PATCH", "/medidas/4")[0]
    assert sent["imc"] == Decimal("35.92")
    assert sent["categoriaPeso"] == "Obesidad"


# =====================================================
# PAYMENTS
# =====================================================

def test_payment_history_summary():
    payments = [
        make_payment(payment_id=1, amount="30", paid_days_ago=60),
        make_payment(payment_id=2, amount="10", paid_days_ago=5, state=PaymentState.PENDING),
        make_payment(payment_id=3, amount="25", paid_days_ago=20, state=PaymentState.VOIDED),
    ]

    history = summarize_history(payments)

    assert [p.id for p in history.pending] == [2]
    assert [p.id for p in history.completed] == [1]
    assert history.total_paid == Decimal("40.00")
    assert history.latest.id == 2
    assert has_pending_debt(payments)
    assert latest_payment(payments).id == 2
    assert latest_payment([]) is None


def test_complete_payment_uses_expected_total(backend):
    backend.on("GET", "/pagos/1", payment_json(amount="20.00"))
    backend.on("PATCH", "/pagos/1", payment_json(amount="30.00", state="Completado"))

    complete_payment(backend, 1)

    sent = backend.sent("PATCH", "/pagos/1")[0]
    assert sent["monto"] == Decimal("30.00")
    assert sent["estado"] == PaymentState.COMPLETED
    assert sent["observaciones"].startswith("Abono. Pago completado")


def test_complete_payment_note_without_previous_notes(backend):
    data = payment_json(amount="20.00")
    data["observaciones"] = None
    backend.on("GET", "/pagos/1", data)
    backend.on("PATCH", "/pagos/1", payment_json(amount="30.00", state="Completado"))

    complete_payment(backend, 1)

    note = backend.sent("PATCH", "/pagos/1")[0]["observaciones"]
    assert note == "Pago completado - Monto anterior: 20.00, Monto final: 30.00"


def test_complete_payment_without_plan(backend):
    data = payment_json()
    data["inscripcion"]["plan"] = None
    backend.on("GET", "/pagos/1", data)

    with pytest.raises(HTTPException) as exc:
        complete_payment(backend, 1)

    assert exc.value.status_code == 400


def test_renewal_rejection_is_explained(backend):
    backend.on("POST", "/pagos/renovar", HTTPException(status_code=403, detail="Forbidden"))

    with pytest.raises(HTTPException) as exc:
        renew_plan(backend, RenewalRequest(client_id=1, plan_id=1, amount=Decimal("30")))

    assert exc.value.detail == RENEWAL_TOO_EARLY


# =====================================================
# MEMBERSHIP
# =====================================================

@pytest.mark.parametrize(
    "birth, expected",
    [
        (date(2000, 6, 15), 25),
        (date(2000, 6, 16), 24),
        (datetime(2010, 1, 1), 15),
    ],
)
def test_age_from_birth_date(birth, expected):
    assert age_from_birth_date(birth, date(2025, 6, 15)) == expected


def test_is_minor():
    assert is_minor(date(2010, 1, 1), date(2025, 6, 15))
    assert not is_minor(date(2000, 1, 1), date(2025, 6, 15))
    assert not is_minor(None, date(2025, 6, 15))


def test_client_summary():
    client = make_client([make_enrollment(end_in_days=3)])

    summary = client_summary(client, NOW)

    assert summary.state == MembershipState.ACTIVE
    assert summary.membership_label == "Active"
    assert summary.days_remaining == 3
    assert summary.age == 35


def test_build_client_detail(backend):
    backend.on("GET", "/clientes/1", client_json(end_date="2025-06-18T12:00:00Z"))
    backend.on("GET", "/pagos/cliente/1", [
        payment_json(payment_id=1, state="Completado", fecha="2025-05-18T10:00:00Z"),
        payment_json(payment_id=2, state="Pendiente", fecha="2025-06-01T10:00:00Z"),
    ])
    backend.on("GET", "/cuotas-mantenimiento/cliente/1", [fee_json(fee_id=1, year=2025)])
    backend.on("GET", "/medidas/cliente/1/ultima", None)

    detail = build_client_detail(backend, 1, NOW)

    assert detail.summary.state == MembershipState.ACTIVE
    assert [p.id for p in detail.payments] == [2, 1]
    assert [p.id for p in detail.pending_payments] == [2]
    assert detail.renewal.reason_code == RenewalReason.ALLOWED
    assert detail.applies_annual_fee is False
    assert detail.quote.minimum == Decimal("40.00")
    assert detail.fees.total_pending == Decimal("10.00")
    assert detail.latest_measurement is None


# =====================================================
# STATISTICS / WHATSAPP
# =====================================================

def _stats_backend(backend):
    backend.on("GET", "/estadisticas/dashboard", {"inscritosMes": "4", "clientesActivos": 20, "ingresosMes": "350.5"})
    backend.on("GET", "/estadisticas/distribucion-membresias", [{"nombrePlan": "Mensual", "cantidad": 3, "porcentaje": 75}])
    backend.on("GET", "/estadisticas/tendencia-clientesingresos", {"meses": ["Ene"], "clientes": [3], "ingresos": [90]})
    backend.on("GET", "/estadisticas/actividades-semanales", [])
    return backend


def test_full_dashboard(backend):
    dashboard = full_dashboard(_stats_backend(backend), NOW)

    assert dashboard.summary.enrolled_this_month == 4
    assert dashboard.summary.income_this_month == Decimal("350.5")
    assert dashboard.distribution[0].plan_name == "Mensual"
    assert dashboard.placeholder is False

    params = [call[3] for call in backend.calls if call[1] == "/estadisticas/actividades-semanales"]
    assert params == [{"mes": 5, "anio": 2025}]


def test_dashboard_degrades_to_placeholder(backend):
    _stats_backend(backend).on(
        "GET", "/estadisticas/distribucion-membresias", HTTPException(status_code=502, detail="down")
    )

    dashboard = dashboard_or_placeholder(backend, NOW)

    assert dashboard.placeholder is True
    assert dashboard.summary.active_clients == 0
    assert dashboard.distribution == []


def test_full_dashboard_does_not_degrade(backend):
    backend.on("GET", "/estadisticas/dashboard", HTTPException(status_code=502, detail="down"))

    with pytest.raises(HTTPException):
        full_dashboard(backend, NOW)


def test_whatsapp_status_degrades_but_reset_raises(backend):
    backend.on("GET", "/whatsapp/status", HTTPException(status_code=502, detail="down"))
    backend.on("POST", "/whatsapp/reset", HTTPException(status_code=500, detail="boom"))

    assert get_status(backend).status == "disconnected"
    with pytest.raises(HTTPException):
        reset_session(backend)
