import logging
from datetime import datetime, timezone
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from jose import ExpiredSignatureError, JWTError, jwt

from gym_portal.core.config import settings
from gym_portal.core.security import session_from_claims
from gym_portal.schemas.session import Session
from gym_portal.services.api_client import BackendClient


logger = logging.getLogger(__name__)

SIGNIN_PATH = "/auth/signin"
HOME_PATH = "/clientes"


def _redirect(location: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail="Redirect",
        headers={"Location": location},
    )


def get_current_session(request: Request) -> Optional[Session]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except ExpiredSignatureError:
        logger.info("Session cookie expired")
        return None
    except JWTError:
        logger.warning("Invalid session cookie")
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        return None

    return session_from_claims(payload)


def require_session(
    session: Optional[Session] = Depends(get_current_session),
) -> Session:
    if session is None:
        raise _redirect(SIGNIN_PATH)
    return session


def redirect_if_authenticated(
    session: Optional[Session] = Depends(get_current_session),
) -> None:
    if session is not None:
        raise _redirect(HOME_PATH)


def get_api_client(
    session: Session = Depends(require_session),
) -> Generator[BackendClient, None, None]:
    client = BackendClient(access_token=session.access_token)
    try:
        yield client
    finally:
        client.close()


def get_now() -> datetime:
    return datetime.now(timezone.utc)
