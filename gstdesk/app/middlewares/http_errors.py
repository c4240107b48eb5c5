"""Count error responses by status code."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..routes_metrics import http_errors_total

ERROR_STATUSES = range(400, 600)


class HttpErrorCounterMiddleware(BaseHTTPMiddleware):
    """Increment ``http_errors_total`` for 4xx and 5xx responses.

    Scrapes of ``/metrics`` are not counted.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        if response.status_code in ERROR_STATUSES and request.url.path != "/metrics":
            http_errors_total.labels(status=str(response.status_code)).inc()
        return response
