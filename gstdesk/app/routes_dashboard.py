"""Client dashboard routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .db import get_session
from .deps.client import get_active_client
from .models import Client
from .repos_sqlalchemy import invoices_repo_sql
from .schemas import ClientSummaryOut
from .utils.responses import ok

router = APIRouter()


@router.get("/api/clients/{client_id}/summary")
def client_summary(
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    data = invoices_repo_sql.summary(session, client.id)
    return ok(ClientSummaryOut(**data).model_dump(mode="json"))


__all__ = ["router"]
