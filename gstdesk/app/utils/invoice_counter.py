"""Utilities for managing invoice counters."""

from datetime import date

from sqlalchemy.orm import Session

from ..models import InvoiceCounter


def fy_code(today: date | None = None) -> str:
    """Return the Indian financial year for ``today``, e.g. ``2025-26``.

    The financial year starts on 1 April.
    """
    today = today or date.today()
    start_year = today.year if today.month >= 4 else today.year - 1
    return f"{start_year}-{str(start_year + 1)[2:]}"


def build_series(client_id: int, today: date | None = None) -> str:
    """Return the counter key for ``client_id`` in the current financial year."""
    return f"{client_id}/{fy_code(today)}"


def next_invoice_number(
    session: Session, client_id: int, prefix: str, today: date | None = None
) -> str:
    """Return the next invoice number for ``client_id``.

    Numbers restart at ``0001`` every financial year and are formatted as
    ``<prefix><FY>/<counter>``, e.g. ``INV-2025-26/0001``. The counter row is
    created if missing and incremented inside the caller's transaction.
    """
    series = build_series(client_id, today)
    counter = session.get(InvoiceCounter, series, with_for_update=True)
    if counter is None:
        counter = InvoiceCounter(series=series, current=0)
        session.add(counter)
    counter.current += 1
    session.flush()
    return f"{prefix}{fy_code(today)}/{counter.current:04d}"
