from datetime import datetime, timedelta, timezone
from decimal import Decimal

from gym_portal.schemas.client import Client
from gym_portal.schemas.enrollment import Enrollment
from gym_portal.schemas.maintenance_fee import FeeState, MaintenanceFee
from gym_portal.schemas.payment import FeeSettlement, Payment, PaymentState
from gym_portal.schemas.plan import Occupation, Plan


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_plan(plan_id=1, price="30.00", months=1, tag=Occupation.WORKER):
    return Plan(
        id=plan_id,
        name=f"Plan {plan_id}",
        duration_months=months,
        price=Decimal(price),
        tag=tag,
    )


def make_enrollment(enrollment_id=1, end_in_days=30, plan=None, now=NOW):
    end = now + timedelta(days=end_in_days) if end_in_days is not None else None
    return Enrollment(
        id=enrollment_id,
        client_id=1,
        plan_id=plan.id if plan else None,
        start_date=now - timedelta(days=30),
        end_date=end,
        plan=plan,
    )


def make_payment(
    amount="30.00",
    plan=None,
    includes_annual_fee=False,
    annual_fee_amount=None,
    fees=(),
    paid_days_ago=0,
    state=PaymentState.COMPLETED,
    payment_id=1,
    with_enrollment=True,
    is_renewal=False,
):
    enrollment = make_enrollment(plan=plan) if with_enrollment else None
    return Payment(
        id=payment_id,
        client_id=1,
        enrollment_id=enrollment.id if enrollment else None,
        amount=Decimal(amount),
        payment_date=NOW - timedelta(days=paid_days_ago),
        state=state,
        is_renewal=is_renewal,
        includes_annual_fee=includes_annual_fee,
        annual_fee_amount=Decimal(annual_fee_amount) if annual_fee_amount is not None else None,
        maintenance_fees=[FeeSettlement(amount=Decimal(a)) for a in fees],
        enrollment=enrollment,
    )


def make_fee(fee_id=1, year=2025, amount="10.00", state=FeeState.PENDING, due_date=None):
    return MaintenanceFee(
        id=fee_id,
        client_id=1,
        year=year,
        amount=Decimal(amount),
        state=state,
        due_date=due_date,
    )


def make_client(enrollments=(), client_id=1, birth_date=datetime(1990, 3, 10)):
    return Client(
        id=client_id,
        first_name="Ana",
        last_name="Pérez",
        national_id="0102030405",
        phone="0991234567",
        address="Av. Amazonas 123",
        city="Quito",
        country="Ecuador",
        email="ana@example.com",
        occupation=Occupation.WORKER,
        job_title="Contadora",
        birth_date=birth_date,
        enrollments=list(enrollments),
    )


# Raw backend payloads, as the REST API sends them.

def plan_json(plan_id=1, price="30.00", tag="Trabajo"):
    return {
        "idPlan": plan_id,
        "nombre": f"Plan {plan_id}",
        "duracionMeses": 1,
        "precio": price,
        "tag": tag,
    }


def client_json(client_id=1, end_date="2025-06-18T12:00:00Z", plan=None):
    data = {
        "idCliente": client_id,
        "nombre": "Ana",
        "apellido": "Pérez",
        "cedula": "0102030405",
        "celular": "0991234567",
        "direccion": "Av. Amazonas 123",
        "ciudad": "Quito",
        "pais": "Ecuador",
        "correo": "ana@example.com",
        "ocupacion": "Trabajo",
        "puestoTrabajo": "Contadora",
        "fechaNacimiento": "1990-03-10T00:00:00Z",
        "inscripciones": [],
        "medidas": [],
    }
    if end_date:
        data["inscripciones"].append({
            "idInscripcion": 7,
            "idCliente": client_id,
            "idPlan": 1,
            "fechaInicio": "2025-05-18T12:00:00Z",
            "fechaFin": end_date,
            "plan": plan or plan_json(),
        })
    return data


def payment_json(payment_id=1, amount="20.00", state="Pendiente", plan=None, fecha="2025-06-01T10:00:00Z"):
    return {
        "idPago": payment_id,
        "idCliente": 1,
        "idInscripcion": 7,
        "monto": amount,
        "fechaPago": fecha,
        "metodoPago": "Efectivo",
        "estado": state,
        "observaciones": "Abono",
        "incluyeAnualidad": False,
        "inscripcion": {
            "idInscripcion": 7,
            "idCliente": 1,
            "idPlan": 1,
            "fechaInicio": "2025-05-18T12:00:00Z",
            "fechaFin": "2025-06-18T12:00:00Z",
            "plan": plan or plan_json(),
        },
    }


def fee_json(fee_id=1, year=2025, state="Pendiente", amount="10.00"):
    return {
        "idCuota": fee_id,
        "idCliente": 1,
        "anio": year,
        "monto": amount,
        "estado": state,
    }
