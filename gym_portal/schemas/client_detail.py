from typing import List, Optional

from pydantic import BaseModel

from gym_portal.schemas.client import Client
from gym_portal.schemas.enrollment import Enrollment
from gym_portal.schemas.maintenance_fee import FeeSummary
from gym_portal.schemas.measurement import Measurement
from gym_portal.schemas.payment import Payment
from gym_portal.schemas.reconciliation import MembershipState, RenewalEligibility, RenewalQuote


class ClientSummary(BaseModel):
    state: MembershipState
    membership_label: str
    days_remaining: int = 0
    active_enrollment: Optional[Enrollment] = None
    age: Optional[int] = None
    is_minor: bool = False


class ClientDetail(BaseModel):
    client: Client
    summary: ClientSummary
    payments: List[Payment]
    pending_payments: List[Payment]
    fees: FeeSummary
    latest_measurement: Optional[Measurement] = None
    renewal: RenewalEligibility
    applies_annual_fee: bool
    quote: RenewalQuote
