from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..db import get_session
from ..models import Client, User
from ..repos_sqlalchemy import clients_repo_sql

"""Dependency helpers for client workspace resolution."""


def get_active_client(
    client_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> Client:
    """Return the client from the ``client_id`` path parameter.

    Raises:
        HTTPException: 404 if the client does not exist, 403 if it belongs to
            another user.
    """
    client = clients_repo_sql.get_client(session, client_id)
    if client is None:
        raise HTTPException(404, "Client not found")
    if client.user_id != user.id:
        raise HTTPException(403, "Forbidden")
    return client
