# auth.py

"""Cookie session authentication for accountants.

Login is email only: the first login for an address creates the user. The
session cookie carries a signed JWT whose ``sub`` claim is the user id.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from config import get_settings

from .db import get_session
from .models import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_session_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Return a signed session token for ``user_id``."""

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.session_max_age_days)
    )
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def read_session_token(token: str) -> Optional[str]:
    """Return the user id stored in ``token`` or ``None`` if it is invalid."""

    try:
        payload = jwt.decode(
            token, get_settings().secret_key, algorithms=[ALGORITHM]
        )
    except jwt.PyJWTError:
        return None
    return payload.get("sub")


def get_or_create_user(session: Session, email: str) -> User:
    """Return the user for ``email``, creating it on first login."""

    email = email.strip().lower()
    user = session.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email, first_name=email.split("@", 1)[0])
        session.add(user)
        session.flush()
        logger.info("created user id=%s", user.id)
    return user


def get_current_user(
    request: Request, session: Session = Depends(get_session)
) -> User:
    """Resolve the signed-in user from the session cookie or raise 401."""

    token = request.cookies.get(get_settings().session_cookie_name)
    user_id = read_session_token(token) if token else None
    user = session.get(User, user_id) if user_id else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


__all__ = [
    "ALGORITHM",
    "create_session_token",
    "get_current_user",
    "get_or_create_user",
    "read_session_token",
]
