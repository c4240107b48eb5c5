import logging
from decimal import Decimal

from gstdesk.app.models import Client, Customer, InvoiceItem
from gstdesk.app.services.invoice_service import (
    check_submitted_totals,
    price_lines,
    resolve_supply_type,
)
from gstdesk.app.tax.gst_engine import InvoiceTotals, SupplyType

TOTALS = InvoiceTotals(Decimal("1000.00"), Decimal("180.00"), Decimal("1180.00"))


def test_matching_or_missing_totals_pass():
    assert check_submitted_totals(TOTALS, subtotal=None, tax_total=None, total=None)
    assert check_submitted_totals(
        TOTALS,
        subtotal=Decimal("1000"),
        tax_total=Decimal("180.0"),
        total=Decimal("1180.00"),
    )


def test_stale_totals_are_logged(caplog):
    with caplog.at_level(logging.INFO):
        agreed = check_submitted_totals(
            TOTALS,
            subtotal=None,
            tax_total=None,
            total=Decimal("1179.99"),
            invoice_number="INV-2025-26/0001",
        )
    assert agreed is False
    assert "INV-2025-26/0001" in caplog.text


def test_explicit_supply_type_is_kept():
    client = Client(gstin="27AAPFU0939F1ZV")
    customer = Customer(gstin="29AABCT1332L1ZD")
    assert (
        resolve_supply_type(
            client, supply_type=SupplyType.INTRA_STATE, customer=customer
        )
        is SupplyType.INTRA_STATE
    )
    assert resolve_supply_type(client, customer=customer) is SupplyType.INTER_STATE


def test_stored_items_can_be_repriced():
    rows = [
        InvoiceItem(
            description="Audit",
            hsn="9982",
            quantity=Decimal("2.0000"),
            rate=Decimal("500.0000"),
            gst_rate=Decimal("18.0000"),
        )
    ]
    results, totals = price_lines(rows, SupplyType.INTER_STATE)
    assert results[0].igst == Decimal("180.00")
    assert results[0].hsn == "9982"
    assert totals.total == Decimal("1180.00")
