"""Invoice routes scoped to a client workspace.

Totals are always recomputed on the server from the submitted line items with
:func:`~.services.invoice_service.price_lines`, the same function that serves
the live preview. Client-sent ``subtotal``/``tax_total``/``total`` values are
only compared and logged.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from config import get_settings

from .db import get_session
from .deps.client import get_active_client
from .models import Client, Customer, Invoice
from .repos_sqlalchemy import customers_repo_sql, invoices_repo_sql
from .routes_metrics import invoice_validation_errors_total, invoices_saved_total
from .schemas import (
    InvoiceIn,
    InvoiceOut,
    InvoicePreviewIn,
    InvoicePreviewOut,
    InvoiceUpdate,
    LineResultOut,
    TotalsOut,
)
from .services.invoice_service import (
    check_submitted_totals,
    price_lines,
    resolve_supply_type,
)
from .tax.gst_engine import ValidationError
from .utils.invoice_counter import next_invoice_number
from .utils.responses import ok

router = APIRouter(prefix="/api/clients/{client_id}/invoices")
logger = logging.getLogger(__name__)

# Header columns that cannot be cleared once set
NOT_NULL_FIELDS = ("customer_id", "number", "date", "status", "is_b2c")
SUPPLY_CONTEXT = ("supply_type", "place_of_supply", "customer_id")


def _out(invoice: Invoice) -> dict:
    return InvoiceOut.model_validate(invoice).model_dump(mode="json")


def _customer(session: Session, client: Client, customer_id: int) -> Customer:
    customer = customers_repo_sql.get_customer(session, client.id, customer_id)
    if customer is None:
        raise HTTPException(404, "Customer not found")
    return customer


def _load(session: Session, client: Client, invoice_id: int) -> Invoice:
    invoice = invoices_repo_sql.get_invoice(session, client.id, invoice_id)
    if invoice is None:
        raise HTTPException(404, "Invoice not found")
    return invoice


def _price(lines, supply_type):
    try:
        return price_lines(lines, supply_type)
    except ValidationError:
        invoice_validation_errors_total.inc()
        raise


def _reload(session: Session, client: Client, invoice_id: int) -> dict:
    # Re-read so the response shows the stored (column-scaled) values.
    session.expire_all()
    return _out(_load(session, client, invoice_id))


@router.get("")
def list_invoices(
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    return ok([_out(i) for i in invoices_repo_sql.list_invoices(session, client.id)])


@router.post("/preview")
def preview_invoice(
    payload: InvoicePreviewIn,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    """Price unsaved form lines without storing anything."""

    customer: Optional[Customer] = None
    if payload.customer_id is not None:
        customer = _customer(session, client, payload.customer_id)
    supply_type = resolve_supply_type(
        client,
        supply_type=payload.supply_type,
        place_of_supply=payload.place_of_supply,
        customer=customer,
    )
    results, totals = _price(payload.items, supply_type)
    preview = InvoicePreviewOut(
        supply_type=supply_type,
        items=[LineResultOut.model_validate(r) for r in results],
        totals=TotalsOut.model_validate(totals),
    )
    return ok(preview.model_dump(mode="json"))


@router.post("", status_code=201)
def create_invoice(
    payload: InvoiceIn,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    customer = _customer(session, client, payload.customer_id)
    supply_type = resolve_supply_type(
        client,
        supply_type=payload.supply_type,
        place_of_supply=payload.place_of_supply,
        customer=customer,
    )
    results, totals = _price(payload.items, supply_type)
    check_submitted_totals(
        totals,
        subtotal=payload.subtotal,
        tax_total=payload.tax_total,
        total=payload.total,
        invoice_number=payload.number,
    )

    header = payload.model_dump(include=set(invoices_repo_sql.HEADER_FIELDS))
    header["supply_type"] = supply_type
    if not payload.number:
        prefix = client.invoice_prefix or get_settings().default_invoice_prefix
        header["number"] = next_invoice_number(
            session, client.id, prefix, payload.date.date()
        )
    invoice = invoices_repo_sql.create_invoice(
        session, client.id, header, results, totals
    )
    session.commit()
    invoices_saved_total.labels(action="create").inc()
    logger.info("invoice created id=%s client=%s", invoice.id, client.id)
    return ok(_reload(session, client, invoice.id))


@router.get("/{invoice_id}")
def get_invoice(
    invoice_id: int,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    return ok(_out(_load(session, client, invoice_id)))


@router.put("/{invoice_id}")
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> dict:
    """Apply a partial update.

    Supplying ``items`` replaces every stored line. Changing only the supply
    context re-prices the stored lines.
    """

    invoice = _load(session, client, invoice_id)
    data = payload.model_dump(exclude_unset=True)
    for key in NOT_NULL_FIELDS:
        if key in data and data[key] is None:
            data.pop(key)

    customer = invoice.customer
    if "customer_id" in data:
        customer = _customer(session, client, data["customer_id"])

    results = totals = None
    if "items" in data or any(key in data for key in SUPPLY_CONTEXT):
        if data.get("supply_type") is not None:
            supply_type = payload.supply_type
        elif any(key in data for key in SUPPLY_CONTEXT):
            supply_type = resolve_supply_type(
                client,
                place_of_supply=data.get("place_of_supply", invoice.place_of_supply),
                customer=customer,
            )
        else:
            supply_type = invoice.supply_type
        lines = payload.items if payload.items is not None else invoice.items
        results, totals = _price(lines, supply_type)
        check_submitted_totals(
            totals,
            subtotal=payload.subtotal,
            tax_total=payload.tax_total,
            total=payload.total,
            invoice_number=invoice.number,
        )
        data["supply_type"] = supply_type

    invoices_repo_sql.update_invoice(session, invoice, data, results, totals)
    session.commit()
    invoices_saved_total.labels(action="update").inc()
    logger.info("invoice updated id=%s client=%s", invoice.id, client.id)
    return ok(_reload(session, client, invoice.id))


@router.delete("/{invoice_id}", status_code=204)
def delete_invoice(
    invoice_id: int,
    client: Client = Depends(get_active_client),
    session: Session = Depends(get_session),
) -> Response:
    invoice = _load(session, client, invoice_id)
    invoices_repo_sql.delete_invoice(session, invoice)
    session.commit()
    return Response(status_code=204)


__all__ = ["router"]
