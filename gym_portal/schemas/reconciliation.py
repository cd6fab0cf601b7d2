from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from gym_portal.schemas.enrollment import Enrollment


class RenewalReason(str, Enum):
    ALLOWED = "Allowed"
    TOO_EARLY = "TooEarly"
    NO_ACTIVE_ENROLLMENT = "NoActiveEnrollment"
    NO_END_DATE = "NoEndDate"


class RenewalEligibility(BaseModel):
    allowed: bool
    reason_code: RenewalReason
    days_remaining: Optional[int] = None


class RenewalBreakdown(BaseModel):
    plan: Decimal
    annual_fee: Decimal
    pending_fees: Decimal


class RenewalQuote(BaseModel):
    minimum: Decimal
    breakdown: RenewalBreakdown


class MembershipState(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    NO_MEMBERSHIP = "NoMembership"

    @property
    def label(self) -> str:
        if self is MembershipState.NO_MEMBERSHIP:
            return "No membership"
        return self.value


class MembershipStatus(BaseModel):
    state: MembershipState
    days_remaining: int = 0
    active_enrollment: Optional[Enrollment] = None


class PaymentBalance(BaseModel):
    payment_id: Optional[int] = None
    expected_total: Decimal
    paid: Decimal
    remaining: Decimal
    state: str
