"""SQLAlchemy implementation for client workspaces."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Client

CLIENT_FIELDS = ("name", "gstin", "address", "invoice_prefix", "bank_details", "logo_url")


def list_clients(session: Session, user_id: str) -> list[Client]:
    """Return clients owned by ``user_id`` in creation order."""
    result = session.execute(
        select(Client).where(Client.user_id == user_id).order_by(Client.id)
    )
    return list(result.scalars().all())


def get_client(session: Session, client_id: int) -> Client | None:
    return session.get(Client, client_id)


def create_client(session: Session, user_id: str, data: Mapping[str, Any]) -> Client:
    client = Client(
        user_id=user_id, **{k: data[k] for k in CLIENT_FIELDS if k in data}
    )
    if not client.invoice_prefix:
        client.invoice_prefix = "INV-"
    session.add(client)
    session.flush()
    return client


def update_client(session: Session, client: Client, data: Mapping[str, Any]) -> Client:
    for key in CLIENT_FIELDS:
        if key in data:
            setattr(client, key, data[key])
    session.flush()
    return client


def delete_client(session: Session, client: Client) -> None:
    """Delete ``client`` together with its customers and invoices."""
    session.delete(client)
    session.flush()
