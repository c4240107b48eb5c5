"""SQLAlchemy implementation for invoice persistence."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..models import Customer, Invoice, InvoiceItem, InvoiceStatus
from ..tax.gst_engine import InvoiceTotals, LineItemResult, money

HEADER_FIELDS = (
    "customer_id",
    "number",
    "date",
    "due_date",
    "place_of_supply",
    "supply_type",
    "status",
    "is_b2c",
)


def _with_children(stmt):
    return stmt.options(selectinload(Invoice.items), selectinload(Invoice.customer))


def _build_items(results: Sequence[LineItemResult]) -> list[InvoiceItem]:
    return [
        InvoiceItem(
            position=position,
            description=result.description,
            hsn=result.hsn,
            quantity=result.quantity,
            rate=result.rate,
            amount=result.amount,
            gst_rate=result.gst_rate,
            igst=result.igst,
            cgst=result.cgst,
            sgst=result.sgst,
        )
        for position, result in enumerate(results)
    ]


def _apply_totals(invoice: Invoice, totals: InvoiceTotals) -> None:
    invoice.subtotal = totals.subtotal
    invoice.tax_total = totals.tax_total
    invoice.total = totals.total


def list_invoices(session: Session, client_id: int) -> list[Invoice]:
    """Return invoices for ``client_id``, newest invoice date first."""

    result = session.execute(
        _with_children(select(Invoice))
        .where(Invoice.client_id == client_id)
        .order_by(Invoice.date.desc(), Invoice.id.desc())
    )
    return list(result.scalars().all())


def get_invoice(session: Session, client_id: int, invoice_id: int) -> Invoice | None:
    """Return invoice ``invoice_id`` if it belongs to ``client_id``."""

    result = session.execute(
        _with_children(select(Invoice)).where(
            Invoice.id == invoice_id, Invoice.client_id == client_id
        )
    )
    return result.scalar_one_or_none()


def create_invoice(
    session: Session,
    client_id: int,
    header: Mapping[str, Any],
    results: Sequence[LineItemResult],
    totals: InvoiceTotals,
) -> Invoice:
    """Insert an invoice with its priced items and return it.

    ``header`` holds the invoice fields from :data:`HEADER_FIELDS`; unknown
    keys are ignored.
    """

    invoice = Invoice(
        client_id=client_id,
        **{key: header[key] for key in HEADER_FIELDS if key in header},
    )
    _apply_totals(invoice, totals)
    invoice.items = _build_items(results)
    session.add(invoice)
    session.flush()
    return invoice


def update_invoice(
    session: Session,
    invoice: Invoice,
    header: Mapping[str, Any],
    results: Sequence[LineItemResult] | None = None,
    totals: InvoiceTotals | None = None,
) -> Invoice:
    """Apply ``header`` changes and, when given, replace every item and total.

    Items are never patched individually: the previous rows are deleted and
    the new ``results`` inserted in their place.
    """

    for key in HEADER_FIELDS:
        if key in header:
            setattr(invoice, key, header[key])
    if results is not None and totals is not None:
        invoice.items = _build_items(results)
        _apply_totals(invoice, totals)
    session.flush()
    return invoice


def delete_invoice(session: Session, invoice: Invoice) -> None:
    session.delete(invoice)
    session.flush()


def summary(session: Session, client_id: int) -> dict:
    """Return dashboard figures for ``client_id``."""

    count, revenue, tax = session.execute(
        select(
            func.count(Invoice.id),
            func.coalesce(func.sum(Invoice.total), 0),
            func.coalesce(func.sum(Invoice.tax_total), 0),
        ).where(Invoice.client_id == client_id)
    ).one()
    pending = session.scalar(
        select(func.count(Invoice.id)).where(
            Invoice.client_id == client_id, Invoice.status == InvoiceStatus.SENT
        )
    )
    customers = session.scalar(
        select(func.count(Customer.id)).where(Customer.client_id == client_id)
    )
    return {
        "invoice_count": count,
        "total_revenue": money(Decimal(str(revenue))),
        "tax_collected": money(Decimal(str(tax))),
        "pending_invoices": pending or 0,
        "customer_count": customers or 0,
    }
