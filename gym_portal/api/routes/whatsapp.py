from datetime import datetime

from fastapi import APIRouter, Depends

from gym_portal.core.dependencies import get_api_client, get_now
from gym_portal.schemas.whatsapp import TestMessageRequest
from gym_portal.services.api_client import BackendClient
from gym_portal.services.whatsapp_service import (
    check_connection,
    get_status,
    reset_session,
    send_test_message,
)


router = APIRouter(prefix="/whatsapp", tags=["WhatsApp"])


@router.get("/status")
def status(api: BackendClient = Depends(get_api_client)):
    return get_status(api)


@router.get("/check-connection")
def connection(
    api: BackendClient = Depends(get_api_client),
    now: datetime = Depends(get_now),
):
    return check_connection(api, now)


@router.post("/reset")
def reset(api: BackendClient = Depends(get_api_client)):
    return reset_session(api)


@router.post("/test-message")
def test_message(request: TestMessageRequest, api: BackendClient = Depends(get_api_client)):
    return send_test_message(api, request)
