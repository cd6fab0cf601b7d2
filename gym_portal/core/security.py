import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import requests
from fastapi import HTTPException
from jose import JWTError, jwt

from gym_portal.core.config import settings
from gym_portal.schemas.session import Session, SessionUser


logger = logging.getLogger(__name__)

STATE_COOKIE_NAME = "gym_auth_state"
STATE_MAX_AGE_MINUTES = 10


def create_session_token(session: Session) -> str:
    to_encode = {
        "sub": session.user.id,
        "name": session.user.name,
        "email": session.user.email,
        "picture": session.user.image,
        "access_token": session.access_token,
        "id_token": session.id_token,
        "exp": session.expires,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def session_from_claims(payload: dict) -> Session:
    return Session(
        user=SessionUser(
            id=payload["sub"],
            name=payload.get("name"),
            email=payload.get("email"),
            image=payload.get("picture"),
        ),
        access_token=payload.get("access_token"),
        id_token=payload.get("id_token"),
        expires=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def new_state() -> str:
    return secrets.token_urlsafe(24)


def build_authorize_url(state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": settings.AUTH0_CLIENT_ID,
        "redirect_uri": settings.AUTH0_REDIRECT_URI,
        "scope": settings.AUTH0_SCOPE,
        "audience": settings.AUTH0_AUDIENCE,
        "state": state,
    }
    return f"{settings.AUTH0_ISSUER}/authorize?{urlencode(params)}"


def build_logout_url(return_to: str) -> str:
    params = {"client_id": settings.AUTH0_CLIENT_ID, "returnTo": return_to}
    return f"{settings.AUTH0_ISSUER}/v2/logout?{urlencode(params)}"


def exchange_code(code: str) -> dict:
    try:
        response = requests.post(
            f"{settings.AUTH0_ISSUER}/oauth/token",
            json={
                "grant_type": "authorization_code",
                "client_id": settings.AUTH0_CLIENT_ID,
                "client_secret": settings.AUTH0_CLIENT_SECRET,
                "code": code,
                "redirect_uri": settings.AUTH0_REDIRECT_URI,
            },
            timeout=settings.API_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.error("Auth0 token exchange failed: %s", exc)
        raise HTTPException(status_code=502, detail="Identity provider unavailable")

    if response.status_code != 200:
        logger.error("Auth0 token exchange rejected: %s %s", response.status_code, response.text)
        raise HTTPException(status_code=401, detail="Sign-in failed")

    return response.json()


def session_from_tokens(tokens: dict, now: datetime) -> Session:
    id_token = tokens.get("id_token")
    if not id_token:
        raise HTTPException(status_code=401, detail="Sign-in failed")

    # The id token comes straight from the token endpoint over TLS.
    try:
        claims = jwt.get_unverified_claims(id_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid identity token")

    audience = claims.get("aud")
    audiences = audience if isinstance(audience, list) else [audience]
    if settings.AUTH0_CLIENT_ID not in audiences:
        raise HTTPException(status_code=401, detail="Invalid identity token")

    if claims.get("iss", "").rstrip("/") != settings.AUTH0_ISSUER:
        raise HTTPException(status_code=401, detail="Invalid identity token")

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return Session(
        user=SessionUser(
            id=subject,
            name=claims.get("name") or claims.get("nickname"),
            email=claims.get("email"),
            image=claims.get("picture"),
        ),
        access_token=tokens.get("access_token"),
        id_token=id_token,
        expires=now + timedelta(minutes=settings.SESSION_MAX_AGE_MINUTES),
    )


def create_state_token(state: str, callback_url: str, now: datetime) -> str:
    to_encode = {
        "state": state,
        "callback_url": callback_url,
        "exp": now + timedelta(minutes=STATE_MAX_AGE_MINUTES),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_state_token(token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.warning("Invalid or expired sign-in state cookie")
        return None


def safe_callback_url(url: Optional[str], default: str) -> str:
    # Only same-site relative paths are followed after sign-in.
    if not url or not url.startswith("/") or url.startswith("//"):
        return default
    return url
