from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SessionUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class Session(BaseModel):
    user: SessionUser
    access_token: Optional[str] = None
    id_token: Optional[str] = None
    expires: datetime
