# main.py

"""FastAPI application for the GST Desk invoicing API."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

from . import db as app_db
from .middlewares import (
    HttpErrorCounterMiddleware,
    LoggingMiddleware,
    RequestIdMiddleware,
)
from .obs import capture_exception, configure_logging, init_sentry
from .routes_auth import router as auth_router
from .routes_clients import router as clients_router
from .routes_customers import router as customers_router
from .routes_dashboard import router as dashboard_router
from .routes_invoices import router as invoices_router
from .routes_metrics import router as metrics_router
from .tax.gst_engine import ValidationError
from .utils.responses import err

settings = get_settings()
app = FastAPI(
    title="GST Desk API",
    version="1.0.0",
    servers=[{"url": "/"}],
    openapi_url="/openapi.json",
)
app.add_middleware(HttpErrorCounterMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIdMiddleware)

configure_logging(settings.log_level)
logger = logging.getLogger("api")
init_sentry(settings.error_dsn, env=os.getenv("ENV"))


def _validation_response(field: str | None, message: str) -> JSONResponse:
    details = {"field": field} if field else None
    return JSONResponse(err("VALIDATION", message, details), status_code=400)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info(
        exc.message,
        extra={"status": 400, "route": request.url.path},
    )
    return _validation_response(exc.field, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    return _validation_response(".".join(loc) or None, first.get("msg", "Invalid request"))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        exc.detail,
        extra={"status": exc.status_code, "route": request.url.path},
    )
    return JSONResponse(
        err(exc.status_code, exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    logger.exception(
        "unhandled_error",
        extra={"status": 500, "route": request.url.path},
    )
    capture_exception(exc)
    return JSONResponse(err(500, "Internal Server Error"), status_code=500)


@app.on_event("startup")
def open_database() -> None:
    """Create the engine unless tests already installed one."""
    if app_db.SessionLocal is None:
        app_db.init_db()


@app.get("/healthz")
async def healthz() -> dict:
    return {"ok": True}


app.include_router(auth_router)
app.include_router(clients_router)
app.include_router(customers_router)
app.include_router(invoices_router)
app.include_router(dashboard_router)
app.include_router(metrics_router)
