import logging
from datetime import datetime

from fastapi import HTTPException

from gym_portal.schemas.whatsapp import (
    TestMessageRequest,
    WhatsAppConnection,
    WhatsAppResponse,
    WhatsAppStatus,
)
from gym_portal.services.api_client import BackendClient, decode


logger = logging.getLogger(__name__)


# Status probes degrade to "disconnected"; actions report their failure.

def get_status(api: BackendClient) -> WhatsAppStatus:
    try:
        return decode(api.get("/whatsapp/status"), WhatsAppStatus)
    except HTTPException as exc:
        logger.warning("WhatsApp status unavailable: %s", exc.detail)
        return WhatsAppStatus(status="disconnected", message="Could not reach the server")


def check_connection(api: BackendClient, now: datetime) -> WhatsAppConnection:
    try:
        return decode(api.get("/whatsapp/check-connection"), WhatsAppConnection)
    except HTTPException as exc:
        logger.warning("WhatsApp connection check failed: %s", exc.detail)
        return WhatsAppConnection(
            connected=False,
            message="Could not verify the connection",
            timestamp=now,
        )


def reset_session(api: BackendClient) -> WhatsAppResponse:
    response = decode(api.post("/whatsapp/reset"), WhatsAppResponse)
    logger.info("WhatsApp session reset: %s", response.status)
    return response


def send_test_message(api: BackendClient, request: TestMessageRequest) -> WhatsAppResponse:
    return decode(api.post("/whatsapp/test-message", request), WhatsAppResponse)
