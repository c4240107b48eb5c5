from datetime import date

from gstdesk.app.models import InvoiceCounter
from gstdesk.app.utils.invoice_counter import build_series, fy_code, next_invoice_number


def test_fy_code_switches_on_first_april():
    assert fy_code(date(2025, 3, 31)) == "2024-25"
    assert fy_code(date(2025, 4, 1)) == "2025-26"
    assert fy_code(date(2099, 12, 31)) == "2099-00"


def test_build_series_is_per_client_and_year():
    assert build_series(7, date(2025, 6, 1)) == "7/2025-26"


def test_numbers_increment_within_year(db_session):
    today = date(2025, 6, 1)
    first = next_invoice_number(db_session, 1, "INV-", today)
    second = next_invoice_number(db_session, 1, "INV-", today)
    db_session.commit()
    assert first == "INV-2025-26/0001"
    assert second == "INV-2025-26/0002"
    assert db_session.get(InvoiceCounter, "1/2025-26").current == 2


def test_numbers_restart_each_year_and_client(db_session):
    next_invoice_number(db_session, 1, "INV-", date(2025, 6, 1))
    assert next_invoice_number(db_session, 1, "INV-", date(2026, 4, 1)) == (
        "INV-2026-27/0001"
    )
    assert next_invoice_number(db_session, 2, "ST/", date(2025, 6, 1)) == (
        "ST/2025-26/0001"
    )
