import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Read by the log filter and by ``err()`` envelopes
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

MAX_REQUEST_ID_LEN = 64


def _incoming_id(request: Request) -> str | None:
    value = request.headers.get("X-Request-ID", "").strip()
    if not value or len(value) > MAX_REQUEST_ID_LEN:
        return None
    return value


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with the caller's ``X-Request-ID`` or a fresh UUID.

    Oversized ids are replaced so they cannot bloat every log line.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = _incoming_id(request) or str(uuid.uuid4())
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response
