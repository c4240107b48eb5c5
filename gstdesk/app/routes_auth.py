from __future__ import annotations

"""Email login and cookie session routes."""

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from config import get_settings

from .auth import create_session_token, get_current_user, get_or_create_user
from .db import get_session
from .models import User
from .schemas import LoginIn, UserOut
from .utils.responses import ok

router = APIRouter()


def _set_session_cookie(response: Response, user: User) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        create_session_token(user.id),
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(get_settings().session_cookie_name)


@router.post("/api/auth/login")
def login(
    payload: LoginIn, response: Response, session: Session = Depends(get_session)
) -> dict:
    """Sign in with an email address, creating the user on first use."""

    if not payload.email or not payload.email.strip():
        raise HTTPException(status_code=400, detail="Email is required")
    user = get_or_create_user(session, payload.email)
    session.commit()
    _set_session_cookie(response, user)
    return ok(UserOut.model_validate(user).model_dump(mode="json"))


@router.get("/api/auth/user")
def current_user(user: User = Depends(get_current_user)) -> dict:
    return ok(UserOut.model_validate(user).model_dump(mode="json"))


@router.get("/api/login")
def login_page() -> RedirectResponse:
    return RedirectResponse("/", status_code=302)


@router.post("/api/logout")
def logout(response: Response) -> dict:
    _clear_session_cookie(response)
    return ok({"logged_out": True})


@router.get("/api/logout")
def logout_redirect() -> RedirectResponse:
    response = RedirectResponse("/", status_code=302)
    _clear_session_cookie(response)
    return response


__all__ = ["router"]
