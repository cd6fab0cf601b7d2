"""
Per-client membership views.

``build_client_detail`` loads everything the client page needs for a single
request. Nothing is cached between requests; every call reads the backend
again, so the view always reflects the state after the last mutation.
"""

import logging
from datetime import date, datetime
from typing import Optional

from gym_portal.schemas.client import Client
from gym_portal.schemas.client_detail import ClientDetail, ClientSummary
from gym_portal.services.api_client import BackendClient
from gym_portal.services.client_service import get_client
from gym_portal.services.maintenance_fee_service import list_client_fees, summarize_fees
from gym_portal.services.measurement_service import get_latest_measurement
from gym_portal.services.payment_service import list_client_payments, summarize_history
from gym_portal.services.reconciliation_service import (
    can_renew,
    membership_status,
    minimum_renewal_amount,
    should_apply_annual_fee,
)


logger = logging.getLogger(__name__)

ADULT_AGE = 18


def age_from_birth_date(birth_date, today: date) -> Optional[int]:
    if birth_date is None:
        return None
    if isinstance(birth_date, datetime):
        birth_date = birth_date.date()

    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_minor(birth_date, today: date) -> bool:
    age = age_from_birth_date(birth_date, today)
    return age is not None and age < ADULT_AGE


def client_summary(client: Client, now: datetime) -> ClientSummary:
    status = membership_status(client, now)
    age = age_from_birth_date(client.birth_date, now.date())

    return ClientSummary(
        state=status.state,
        membership_label=status.state.label,
        days_remaining=status.days_remaining,
        active_enrollment=status.active_enrollment,
        age=age,
        is_minor=is_minor(client.birth_date, now.date()),
    )


def build_client_detail(api: BackendClient, client_id: int, now: datetime) -> ClientDetail:
    client = get_client(api, client_id)
    payments = list_client_payments(api, client_id)
    fees = list_client_fees(api, client_id)
    latest_measurement = get_latest_measurement(api, client_id)

    summary = client_summary(client, now)
    history = summarize_history(payments)

    active = summary.active_enrollment
    plan = active.plan if active is not None else None
    applies_annual_fee = should_apply_annual_fee(payments, is_new_client=False, now=now)

    logger.debug("Loaded detail for client %s (%s payments, %s fees)", client_id, len(payments), len(fees))

    return ClientDetail(
        client=client,
        summary=summary,
        payments=payments,
        pending_payments=history.pending,
        fees=summarize_fees(fees),
        latest_measurement=latest_measurement,
        renewal=can_renew(active, now),
        applies_annual_fee=applies_annual_fee,
        quote=minimum_renewal_amount(fees, plan, applies_annual_fee),
    )
