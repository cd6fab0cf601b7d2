from typing import Optional

from fastapi import APIRouter, Depends, Query

from gym_portal.core.dependencies import get_api_client
from gym_portal.schemas.plan import Occupation
from gym_portal.services.api_client import BackendClient
from gym_portal.services.plan_service import filter_plans_by_occupation, get_plan, list_plans


router = APIRouter(prefix="/planes", tags=["Plans"])


@router.get("")
def get_plans(
    occupation: Optional[Occupation] = Query(None, alias="ocupacion"),
    api: BackendClient = Depends(get_api_client),
):
    plans = list_plans(api)
    if occupation is None:
        return plans
    return filter_plans_by_occupation(plans, occupation)


@router.get("/{plan_id}")
def get_one(plan_id: int, api: BackendClient = Depends(get_api_client)):
    return get_plan(api, plan_id)
