"""Client workspace routes for the signed-in accountant."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from .auth import get_current_user
from .db import get_session
from .deps.client import get_active_client
from .models import Client, User
from .repos_sqlalchemy import clients_repo_sql
from .schemas import ClientIn, ClientOut, ClientUpdate
from .utils.responses import ok

router = APIRouter(prefix="/api/clients")

REQUIRED_FIELDS = ("name", "gstin", "address")


def _out(client: Client) -> dict:
    return ClientOut.model_validate(client).model_dump(mode="json")


@router.get("")
def list_clients(
    user: User = Depends(get_current_user), session: Session = Depends(get_session)
) -> dict:
    return ok([_out(c) for c in clients_repo_sql.list_clients(session, user.id)])


@router.post("", status_code=201)
def create_client(
    payload: ClientIn,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    client = clients_repo_sql.create_client(session, user.id, payload.model_dump())
    session.commit()
    return ok(_out(client))


@router.get("/{client_id}")
def get_client(client: Client = Depends(get_active_client)) -> dict:
    return ok(_out(client))


@router.put("/{client_id}")
def update_client(
    payload: ClientUpdate,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    data = payload.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if data.get(key, "") is None:
            data.pop(key)
    clients_repo_sql.update_client(session, client, data)
    session.commit()
    return ok(_out(client))


@router.delete("/{client_id}", status_code=204)
def delete_client(
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> Response:
    """Delete the client with all of its customers and invoices."""
    clients_repo_sql.delete_client(session, client)
    session.commit()
    return Response(status_code=204)


__all__ = ["router"]
