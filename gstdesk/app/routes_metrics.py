# routes_metrics.py

"""Prometheus metrics and /metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

router = APIRouter()

http_errors_total = Counter("http_errors_total", "Total HTTP errors", ["status"])
http_errors_total.labels(status="0").inc(0)

invoices_saved_total = Counter(
    "invoices_saved_total", "Total invoices created or updated", ["action"]
)
invoices_saved_total.labels(action="create").inc(0)
invoices_saved_total.labels(action="update").inc(0)

invoice_validation_errors_total = Counter(
    "invoice_validation_errors_total", "Invoice payloads rejected by the tax engine"
)
invoice_validation_errors_total.inc(0)


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
