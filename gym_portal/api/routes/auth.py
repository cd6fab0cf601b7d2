import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from gym_portal.core.config import settings
from gym_portal.core.dependencies import HOME_PATH, SIGNIN_PATH, get_current_session, redirect_if_authenticated
from gym_portal.core.security import (
    STATE_COOKIE_NAME,
    STATE_MAX_AGE_MINUTES,
    build_authorize_url,
    build_logout_url,
    create_session_token,
    create_state_token,
    exchange_code,
    new_state,
    read_state_token,
    safe_callback_url,
    session_from_tokens,
)
from gym_portal.schemas.session import Session


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _signin_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(
        f"{SIGNIN_PATH}?{urlencode({'error': error})}",
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/signin")
def signin(
    error: Optional[str] = Query(None),
    callback_url: str = Query(HOME_PATH, alias="callbackUrl"),
    guard=Depends(redirect_if_authenticated),
):
    callback_url = safe_callback_url(callback_url, HOME_PATH)
    return {
        "error": error,
        "callbackUrl": callback_url,
        "loginUrl": f"/auth/login?{urlencode({'callbackUrl': callback_url})}",
    }


@router.get("/login")
def login(callback_url: str = Query(HOME_PATH, alias="callbackUrl")):
    state = new_state()
    now = datetime.now(timezone.utc)

    response = RedirectResponse(build_authorize_url(state), status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        STATE_COOKIE_NAME,
        create_state_token(state, safe_callback_url(callback_url, HOME_PATH), now),
        max_age=STATE_MAX_AGE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/callback")
def callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
):
    if error:
        logger.warning("Sign-in rejected by identity provider: %s", error)
        return _signin_redirect(error)

    stored = read_state_token(request.cookies.get(STATE_COOKIE_NAME))
    if not code or not stored or stored.get("state") != state:
        logger.warning("Sign-in callback with missing code or mismatched state")
        return _signin_redirect("InvalidState")

    now = datetime.now(timezone.utc)
    try:
        session = session_from_tokens(exchange_code(code), now)
    except HTTPException as exc:
        logger.error("Sign-in failed: %s", exc.detail)
        return _signin_redirect("Callback")

    logger.info("User %s signed in", session.user.id)

    response = RedirectResponse(
        safe_callback_url(stored.get("callback_url"), HOME_PATH),
        status_code=status.HTTP_303_SEE_OTHER,
    )
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        create_session_token(session),
        max_age=settings.SESSION_MAX_AGE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


@router.post("/signout")
def signout(request: Request):
    return_to = str(request.base_url).rstrip("/") + SIGNIN_PATH

    response = RedirectResponse(build_logout_url(return_to), status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@router.get("/session")
def current_session(session: Optional[Session] = Depends(get_current_session)):
    if session is None:
        return {"user": None, "expires": None}
    return {"user": session.user, "expires": session.expires}
