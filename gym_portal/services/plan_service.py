import calendar
from datetime import date, datetime
from typing import List, Optional, Union

from gym_portal.schemas.plan import Occupation, Plan
from gym_portal.services.api_client import BackendClient, decode


def list_plans(api: BackendClient) -> List[Plan]:
    return decode(api.get("/planes"), List[Plan])


def get_plan(api: BackendClient, plan_id: int) -> Plan:
    return decode(api.get(f"/planes/{plan_id}"), Plan)


def find_plan(plans: List[Plan], plan_id: Optional[int]) -> Optional[Plan]:
    if plan_id is None:
        return None
    return next((plan for plan in plans if plan.id == plan_id), None)


def compute_end_date(start: Union[date, datetime], duration_months: int):
    """Add whole months to ``start``, clamping to the last day of the month."""
    month_index = start.month - 1 + duration_months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def filter_plans_by_occupation(plans: List[Plan], occupation) -> List[Plan]:
    if not plans:
        return []

    value = getattr(occupation, "value", occupation)

    if value == Occupation.CHILD.value:
        wanted = Occupation.CHILD
    elif value == Occupation.STUDENT.value:
        wanted = Occupation.STUDENT
    else:
        wanted = Occupation.WORKER

    return [plan for plan in plans if plan.tag == wanted]
