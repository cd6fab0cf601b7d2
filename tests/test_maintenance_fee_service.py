from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi import HTTPException

from gym_portal.schemas.maintenance_fee import FeeCreate, FeeState
from gym_portal.services.maintenance_fee_service import (
    create_fee,
    delete_fee,
    ensure_fee_for_year,
    mark_fee_paid,
    next_overdue_fee,
    renewal_restriction_message,
    requires_new_fee_for_year,
    summarize_fees,
)

from factories import NOW, fee_json, make_fee, make_plan


def test_summary_orders_pending_oldest_first():
    fees = [
        make_fee(fee_id=3, year=2025),
        make_fee(fee_id=1, year=2023, state=FeeState.PAID),
        make_fee(fee_id=2, year=2024),
        make_fee(fee_id=4, year=2022, state=FeeState.PAID),
    ]

    summary = summarize_fees(fees)

    assert [fee.year for fee in summary.pending] == [2024, 2025]
    assert [fee.year for fee in summary.paid] == [2023, 2022]
    assert summary.total_pending == Decimal("20.00")
    assert summary.next_due.year == 2024


def test_summary_of_no_fees():
    summary = summarize_fees([])

    assert summary.total_pending == Decimal("0")
    assert summary.next_due is None


def test_requires_new_fee_for_year():
    fees = [make_fee(year=2024)]

    assert requires_new_fee_for_year(fees, 2025)
    assert not requires_new_fee_for_year(fees, 2024)


def test_next_overdue_fee_ignores_future_and_paid():
    fees = [
        make_fee(fee_id=1, year=2024, due_date=NOW - timedelta(days=100)),
        make_fee(fee_id=2, year=2025, due_date=NOW + timedelta(days=10)),
        make_fee(fee_id=3, year=2023, state=FeeState.PAID, due_date=NOW - timedelta(days=400)),
    ]

    assert next_overdue_fee(fees, NOW).id == 1
    assert next_overdue_fee(fees[1:], NOW) is None


def test_restriction_message_mentions_pending_fees():
    fees = [make_fee(fee_id=1, year=2024), make_fee(fee_id=2, year=2025)]

    message = renewal_restriction_message(fees, make_plan(price="30.00"), include_annual_fee=True)

    assert message == "Minimum payment $60.00 (plan + 2 pending fees + annual fee)"
    assert renewal_restriction_message([], make_plan(price="30.00"), False) == "Minimum amount: $30.00"


def test_create_fee_rejects_duplicate_year(backend):
    backend.on("GET", "/cuotas-mantenimiento/cliente/1", [fee_json(year=2025)])

    with pytest.raises(HTTPException) as exc:
        create_fee(backend, FeeCreate(client_id=1, year=2025))

    assert exc.value.status_code == 409
    assert backend.sent("POST", "/cuotas-mantenimiento") == []


def test_ensure_fee_for_year_reuses_existing(backend):
    backend.on("GET", "/cuotas-mantenimiento/cliente/1", [fee_json(fee_id=5, year=2025)])

    fee = ensure_fee_for_year(backend, 1, 2025)

    assert fee.id == 5
    assert backend.sent("POST", "/cuotas-mantenimiento") == []


def test_ensure_fee_for_year_creates_default_fee(backend):
    backend.on("GET", "/cuotas-mantenimiento/cliente/1", [])
    backend.on("POST", "/cuotas-mantenimiento", fee_json(fee_id=6, year=2025))

    fee = ensure_fee_for_year(backend, 1, 2025)

    assert fee.id == 6
    sent = backend.sent("POST", "/cuotas-mantenimiento")[0]
    assert sent["anio"] == 2025
    assert sent["monto"] == Decimal("10.00")


def test_mark_fee_paid_links_payment(backend):
    backend.on("PATCH", "/cuotas-mantenimiento/3/pagar", fee_json(fee_id=3, state="Pagada"))

    fee = mark_fee_paid(backend, 3, 44, NOW)

    assert fee.state == FeeState.PAID
    sent = backend.sent("PATCH", "/cuotas-mantenimiento/3/pagar")[0]
    assert sent["idPago"] == 44
    assert sent["estado"] == "Pagada"


@pytest.mark.parametrize(
    "status_code, detail",
    [(403, "This fee is already paid and cannot be deleted"), (404, "Maintenance fee not found")],
)
def test_delete_fee_error_messages(backend, status_code, detail):
    backend.on("DELETE", "/cuotas-mantenimiento/3", HTTPException(status_code=status_code, detail="x"))

    with pytest.raises(HTTPException) as exc:
        delete_fee(backend, 3)

    assert exc.value.status_code == status_code
    assert exc.value.detail == detail
