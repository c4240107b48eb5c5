# schemas.py

"""Pydantic models for API payloads and responses.

Each entity shape has one input model that coerces wire values (JSON numbers
or numeric strings) into ``Decimal`` and checks that required fields are
present. Numeric ranges are left to :mod:`.tax.gst_engine` so that previews
and saved invoices reject exactly the same lines.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import InvoiceStatus
from .tax.gst_engine import SupplyType
from .tax.place_of_supply import is_valid_gstin


def _clean_gstin(value: Optional[str], *, required: bool) -> Optional[str]:
    if value is None or not value.strip():
        if required:
            raise ValueError("GSTIN is required")
        return None
    value = value.strip().upper()
    if not is_valid_gstin(value):
        raise ValueError("Invalid GSTIN")
    return value


class LoginIn(BaseModel):
    """Email-only login payload."""

    email: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


# Clients


class ClientIn(BaseModel):
    """Input schema for creating a client workspace."""

    name: str = Field(min_length=1)
    gstin: str
    address: str = Field(min_length=1)
    invoice_prefix: Optional[str] = "INV-"
    bank_details: Optional[str] = None
    logo_url: Optional[str] = None

    @field_validator("gstin")
    @classmethod
    def _gstin(cls, value: str) -> str:
        return _clean_gstin(value, required=True)


class ClientUpdate(BaseModel):
    """Partial update for a client; omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1)
    gstin: Optional[str] = None
    address: Optional[str] = Field(default=None, min_length=1)
    invoice_prefix: Optional[str] = None
    bank_details: Optional[str] = None
    logo_url: Optional[str] = None

    @field_validator("gstin")
    @classmethod
    def _gstin(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_gstin(value, required=True)


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    name: str
    gstin: str
    address: str
    invoice_prefix: Optional[str] = None
    bank_details: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None


# Customers


class CustomerIn(BaseModel):
    """Input schema for creating a customer; ``gstin`` is optional for B2C."""

    name: str = Field(min_length=1)
    gstin: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("gstin")
    @classmethod
    def _gstin(cls, value: Optional[str]) -> Optional[str]:
        return _clean_gstin(value, required=False)


class CustomerUpdate(CustomerIn):
    name: Optional[str] = Field(default=None, min_length=1)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    name: str
    gstin: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


# Invoices


class InvoiceLineIn(BaseModel):
    """Invoice line as sent by the form, for preview and for saving alike.

    Client-computed ``amount``/``cgst``/``sgst``/``igst`` values are ignored.
    A blank description is rejected by the tax engine, not here.
    """

    description: str = ""
    hsn: Optional[str] = None
    quantity: Decimal
    rate: Decimal
    gst_rate: Decimal


class InvoiceIn(BaseModel):
    """Input schema for creating an invoice with its items.

    ``subtotal``, ``tax_total`` and ``total`` are accepted as display hints
    only; the stored values are always recomputed from ``items``.
    """

    customer_id: int
    number: Optional[str] = None
    date: datetime
    due_date: Optional[datetime] = None
    place_of_supply: Optional[str] = None
    supply_type: Optional[SupplyType] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    is_b2c: bool = False
    items: List[InvoiceLineIn]
    subtotal: Optional[Decimal] = None
    tax_total: Optional[Decimal] = None
    total: Optional[Decimal] = None


class InvoiceUpdate(BaseModel):
    """Partial invoice update; ``items`` replaces every stored line when set."""

    customer_id: Optional[int] = None
    number: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    place_of_supply: Optional[str] = None
    supply_type: Optional[SupplyType] = None
    status: Optional[InvoiceStatus] = None
    is_b2c: Optional[bool] = None
    items: Optional[List[InvoiceLineIn]] = None
    subtotal: Optional[Decimal] = None
    tax_total: Optional[Decimal] = None
    total: Optional[Decimal] = None


class InvoicePreviewIn(BaseModel):
    """Unsaved invoice form state sent for a live totals preview."""

    customer_id: Optional[int] = None
    place_of_supply: Optional[str] = None
    supply_type: Optional[SupplyType] = None
    items: List[InvoiceLineIn]


class LineResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    description: str
    hsn: Optional[str] = None
    quantity: Decimal
    rate: Decimal
    gst_rate: Decimal
    amount: Decimal
    tax_amount: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal


class TotalsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subtotal: Decimal
    tax_total: Decimal
    total: Decimal


class InvoicePreviewOut(BaseModel):
    supply_type: SupplyType
    items: List[LineResultOut]
    totals: TotalsOut


class InvoiceItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    hsn: Optional[str] = None
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    gst_rate: Decimal
    igst: Decimal
    cgst: Decimal
    sgst: Decimal


class InvoiceOut(BaseModel):
    """Invoice details with line items and customer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    customer_id: int
    number: str
    date: datetime
    due_date: Optional[datetime] = None
    place_of_supply: Optional[str] = None
    supply_type: SupplyType
    status: InvoiceStatus
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal
    is_b2c: bool
    created_at: Optional[datetime] = None
    items: List[InvoiceItemOut] = []
    customer: Optional[CustomerOut] = None


class ClientSummaryOut(BaseModel):
    """Dashboard figures for a client workspace."""

    invoice_count: int
    total_revenue: Decimal
    tax_collected: Decimal
    pending_invoices: int
    customer_count: int


__all__ = [
    "LoginIn",
    "UserOut",
    "ClientIn",
    "ClientUpdate",
    "ClientOut",
    "CustomerIn",
    "CustomerUpdate",
    "CustomerOut",
    "InvoiceLineIn",
    "InvoiceIn",
    "InvoiceUpdate",
    "InvoicePreviewIn",
    "InvoicePreviewOut",
    "LineResultOut",
    "TotalsOut",
    "InvoiceItemOut",
    "InvoiceOut",
    "ClientSummaryOut",
]
