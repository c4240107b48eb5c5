from __future__ import annotations

"""Glue between invoice payloads and the GST engine.

The preview endpoint and the create/update handlers price lines through
:func:`price_lines` so the numbers shown while editing are the numbers that
get stored.
"""

import logging
from decimal import Decimal
from typing import Iterable, Protocol, Sequence

from ..models import Client, Customer
from ..tax.gst_engine import (
    InvoiceTotals,
    LineItemInput,
    LineItemResult,
    SupplyType,
    compute_totals,
)
from ..tax.place_of_supply import supply_type_for

logger = logging.getLogger(__name__)


class _Line(Protocol):
    description: str
    hsn: str | None
    quantity: Decimal
    rate: Decimal
    gst_rate: Decimal


def to_line_inputs(lines: Iterable[_Line]) -> list[LineItemInput]:
    """Convert request lines or stored :class:`InvoiceItem` rows to engine input."""

    return [
        LineItemInput(
            description=line.description,
            hsn=line.hsn or None,
            quantity=line.quantity,
            rate=line.rate,
            gst_rate=line.gst_rate,
        )
        for line in lines
    ]


def resolve_supply_type(
    client: Client,
    *,
    supply_type: SupplyType | None = None,
    place_of_supply: str | None = None,
    customer: Customer | None = None,
) -> SupplyType:
    """Return the explicit ``supply_type`` or derive it from the parties' states."""

    if supply_type is not None:
        return supply_type
    return supply_type_for(
        client.gstin,
        place_of_supply,
        customer.gstin if customer is not None else None,
    )


def price_lines(
    lines: Sequence[_Line], supply_type: SupplyType
) -> tuple[list[LineItemResult], InvoiceTotals]:
    """Price ``lines`` with the GST engine."""

    return compute_totals(to_line_inputs(lines), supply_type)


def check_submitted_totals(
    totals: InvoiceTotals,
    *,
    subtotal: Decimal | None,
    tax_total: Decimal | None,
    total: Decimal | None,
    invoice_number: str | None = None,
) -> bool:
    """Compare client-sent totals with the computed ones.

    Returns ``True`` when they agree or were not sent. A disagreement is logged
    and otherwise ignored.
    """

    submitted = {"subtotal": subtotal, "tax_total": tax_total, "total": total}
    computed = {
        "subtotal": totals.subtotal,
        "tax_total": totals.tax_total,
        "total": totals.total,
    }
    stale = {
        key: str(value)
        for key, value in submitted.items()
        if value is not None and value != computed[key]
    }
    if stale:
        logger.info(
            "client totals disagree with computed totals invoice=%s submitted=%s",
            invoice_number,
            stale,
        )
        return False
    return True

