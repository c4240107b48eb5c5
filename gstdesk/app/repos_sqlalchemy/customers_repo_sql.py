"""SQLAlchemy implementation for a client's customers."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import Customer, Invoice

CUSTOMER_FIELDS = ("name", "gstin", "address", "email", "phone")


def list_customers(session: Session, client_id: int) -> list[Customer]:
    """Return customers of ``client_id`` sorted by name."""
    result = session.execute(
        select(Customer)
        .where(Customer.client_id == client_id)
        .order_by(Customer.name, Customer.id)
    )
    return list(result.scalars().all())


def get_customer(session: Session, client_id: int, customer_id: int) -> Customer | None:
    """Return customer ``customer_id`` only if it belongs to ``client_id``."""
    result = session.execute(
        select(Customer).where(
            Customer.id == customer_id, Customer.client_id == client_id
        )
    )
    return result.scalar_one_or_none()


def create_customer(
    session: Session, client_id: int, data: Mapping[str, Any]
) -> Customer:
    customer = Customer(
        client_id=client_id, **{k: data[k] for k in CUSTOMER_FIELDS if k in data}
    )
    session.add(customer)
    session.flush()
    return customer


def update_customer(
    session: Session, customer: Customer, data: Mapping[str, Any]
) -> Customer:
    for key in CUSTOMER_FIELDS:
        if key in data:
            setattr(customer, key, data[key])
    session.flush()
    return customer


def invoice_count(session: Session, customer: Customer) -> int:
    return session.scalar(
        select(func.count(Invoice.id)).where(Invoice.customer_id == customer.id)
    ) or 0


def delete_customer(session: Session, customer: Customer) -> None:
    session.delete(customer)
    session.flush()
