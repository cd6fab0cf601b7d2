from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class WhatsAppStatus(BaseModel):
    status: Literal["connected", "disconnected"]
    message: str


class WhatsAppConnection(BaseModel):
    connected: bool
    message: str
    timestamp: datetime


class WhatsAppResponse(BaseModel):
    status: Literal["success", "error"]
    message: str


class TestMessageRequest(BaseModel):
    phone_number: str = Field(alias="phoneNumber", min_length=7)

    class Config:
        populate_by_name = True
