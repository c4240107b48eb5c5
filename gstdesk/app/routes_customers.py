"""Customer routes scoped to a client workspace."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from .db import get_session
from .deps.client import get_active_client
from .models import Client, Customer
from .repos_sqlalchemy import customers_repo_sql
from .schemas import CustomerIn, CustomerOut, CustomerUpdate
from .utils.responses import ok

router = APIRouter(prefix="/api/clients/{client_id}/customers")


def _out(customer: Customer) -> dict:
    return CustomerOut.model_validate(customer).model_dump(mode="json")


def _load(session: Session, client: Client, customer_id: int) -> Customer:
    customer = customers_repo_sql.get_customer(session, client.id, customer_id)
    if customer is None:
        raise HTTPException(404, "Customer not found")
    return customer


@router.get("")
def list_customers(
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    return ok([_out(c) for c in customers_repo_sql.list_customers(session, client.id)])


@router.post("", status_code=201)
def create_customer(
    payload: CustomerIn,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    customer = customers_repo_sql.create_customer(
        session, client.id, payload.model_dump()
    )
    session.commit()
    return ok(_out(customer))


@router.get("/{customer_id}")
def get_customer(
    customer_id: int,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    return ok(_out(_load(session, client, customer_id)))


@router.put("/{customer_id}")
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    customer = _load(session, client, customer_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("name", "") is None:
        data.pop("name")
    customers_repo_sql.update_customer(session, customer, data)
    session.commit()
    return ok(_out(customer))


@router.delete("/{customer_id}", status_code=204)
def delete_customer(
    customer_id: int,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> Response:
    """Delete a customer that has not been invoiced yet."""
    customer = _load(session, client, customer_id)
    if customers_repo_sql.invoice_count(session, customer):
        raise HTTPException(409, "Customer has invoices")
    customers_repo_sql.delete_customer(session, customer)
    session.commit()
    return Response(status_code=204)


__all__ = ["router"]
