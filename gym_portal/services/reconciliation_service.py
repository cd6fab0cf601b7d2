"""
Membership payment reconciliation.

Pure functions only: every caller hands in fully resolved payments,
enrollments, plans and fee records, plus an explicit ``now``. Nothing here
performs I/O or reads the clock, so the same inputs always give the same
answer. The backend persists the real state; these numbers are what the
portal shows and what it uses to reject input before submitting it.
"""

import math
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from gym_portal.schemas.client import Client
from gym_portal.schemas.enrollment import Enrollment
from gym_portal.schemas.maintenance_fee import FeeState, MaintenanceFee
from gym_portal.schemas.payment import Payment, PaymentState
from gym_portal.schemas.plan import Plan
from gym_portal.schemas.reconciliation import (
    MembershipState,
    MembershipStatus,
    PaymentBalance,
    RenewalBreakdown,
    RenewalEligibility,
    RenewalQuote,
    RenewalReason,
)


ANNUAL_FEE_AMOUNT = Decimal("10.00")
RENEWAL_WINDOW_DAYS = 5
ANNUAL_FEE_LOOKBACK = timedelta(days=365)

_CENT = Decimal("0.01")
_ZERO = Decimal("0.00")
_SECONDS_PER_DAY = 86400


def round_money(value) -> Decimal:
    if value is None:
        return _ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes coming from the backend are UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_until(end_date: datetime, now: datetime) -> int:
    """Whole days from ``now`` to ``end_date``, rounded up. Negative once past."""
    delta = _as_utc(end_date) - _as_utc(now)
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def _resolve_plan(payment: Payment) -> Optional[Plan]:
    if payment.enrollment is None:
        return None
    return payment.enrollment.plan


# =====================================================
# PAYMENT TOTALS
# =====================================================

def expected_plan_total(payment: Payment) -> Decimal:
    plan = _resolve_plan(payment)
    if plan is None:
        return _ZERO

    total = round_money(plan.price)

    if payment.includes_annual_fee:
        fee = payment.annual_fee_amount
        total += round_money(ANNUAL_FEE_AMOUNT if fee is None else fee)

    # Only fees bundled on this very payment record count towards it.
    for settlement in payment.maintenance_fees:
        total += round_money(settlement.amount)

    return total


def remaining_balance(payment: Payment) -> Decimal:
    return max(_ZERO, expected_plan_total(payment) - round_money(payment.amount))


def completion_state(candidate_amount, payment: Payment) -> PaymentState:
    if round_money(candidate_amount) >= expected_plan_total(payment):
        return PaymentState.COMPLETED
    return PaymentState.PENDING


def payment_balance(payment: Payment) -> PaymentBalance:
    return PaymentBalance(
        payment_id=payment.id,
        expected_total=expected_plan_total(payment),
        paid=round_money(payment.amount),
        remaining=remaining_balance(payment),
        state=completion_state(payment.amount, payment).value,
    )


# =====================================================
# RENEWALS
# =====================================================

def pending_fee_total(fees: Iterable[MaintenanceFee]) -> Decimal:
    return sum(
        (round_money(fee.amount) for fee in fees if fee.state == FeeState.PENDING),
        _ZERO,
    )


def minimum_renewal_amount(
    client_fees: Iterable[MaintenanceFee],
    plan: Optional[Plan],
    include_annual_fee: bool,
) -> RenewalQuote:
    plan_price = round_money(plan.price) if plan is not None else _ZERO
    annual_fee = ANNUAL_FEE_AMOUNT if include_annual_fee else _ZERO
    pending = pending_fee_total(client_fees)

    return RenewalQuote(
        minimum=plan_price + annual_fee + pending,
        breakdown=RenewalBreakdown(
            plan=plan_price,
            annual_fee=annual_fee,
            pending_fees=pending,
        ),
    )


def can_renew(enrollment: Optional[Enrollment], now: datetime) -> RenewalEligibility:
    if enrollment is None:
        return RenewalEligibility(
            allowed=False,
            reason_code=RenewalReason.NO_ACTIVE_ENROLLMENT,
        )

    if enrollment.end_date is None:
        return RenewalEligibility(
            allowed=False,
            reason_code=RenewalReason.NO_END_DATE,
        )

    remaining = days_until(enrollment.end_date, now)

    if remaining > RENEWAL_WINDOW_DAYS:
        return RenewalEligibility(
            allowed=False,
            reason_code=RenewalReason.TOO_EARLY,
            days_remaining=remaining,
        )

    return RenewalEligibility(
        allowed=True,
        reason_code=RenewalReason.ALLOWED,
        days_remaining=remaining,
    )


# =====================================================
# MEMBERSHIP STATUS
# =====================================================

def _enrollment_sort_key(enrollment: Enrollment):
    enrollment_id = enrollment.id if enrollment.id is not None else -1
    return (_as_utc(enrollment.end_date), enrollment_id)


def select_active_enrollment(enrollments: Sequence[Enrollment]) -> Optional[Enrollment]:
    """Latest end date wins; ties go to the highest enrollment id."""
    dated = [e for e in enrollments if e.end_date is not None]
    if not dated:
        return None
    return max(dated, key=_enrollment_sort_key)


def membership_status(client: Client, now: datetime) -> MembershipStatus:
    active = select_active_enrollment(client.enrollments)

    if active is None:
        return MembershipStatus(state=MembershipState.NO_MEMBERSHIP)

    days_remaining = max(0, days_until(active.end_date, now))

    if _as_utc(active.end_date) > _as_utc(now):
        state = MembershipState.ACTIVE
    else:
        state = MembershipState.EXPIRED

    return MembershipStatus(
        state=state,
        days_remaining=days_remaining,
        active_enrollment=active,
    )


# =====================================================
# ANNUAL FEE
# =====================================================

def _is_fee_bearing(payment: Payment) -> bool:
    if payment.state == PaymentState.VOIDED:
        return False
    if payment.includes_annual_fee or payment.is_renewal:
        return True

    tied_to_enrollment = payment.enrollment_id is not None or payment.enrollment is not None
    if tied_to_enrollment:
        return True

    # A payment that only settles maintenance fees is not a plan transaction.
    return not payment.maintenance_fees


def should_apply_annual_fee(
    past_payments: Iterable[Payment],
    is_new_client: bool,
    now: datetime,
) -> bool:
    if is_new_client:
        return True

    payments = list(past_payments)
    if not payments:
        return True

    window_start = _as_utc(now) - ANNUAL_FEE_LOOKBACK

    for payment in payments:
        if payment.payment_date is None:
            continue
        if _as_utc(payment.payment_date) < window_start:
            continue
        if _is_fee_bearing(payment):
            return False

    return True
