"""Database models for accountants, their clients and client invoices.

Every client-owned row carries ``client_id`` so queries can be scoped to the
workspace that is active in the request. Money columns use ``Numeric(12, 2)``
and are written from :mod:`gstdesk.app.tax.gst_engine` results only. Line
quantity and rate keep four places so stored rows can be re-priced exactly."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

from .tax.gst_engine import SupplyType

Base = declarative_base()


class InvoiceStatus(str, enum.Enum):
    """Lifecycle states for an invoice."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class User(Base):
    """Accountant who owns client workspaces."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    clients = relationship("Client", back_populates="user")


class Client(Base):
    """GST-registered business managed by an accountant."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    gstin = Column(String, nullable=False)
    address = Column(Text, nullable=False)
    invoice_prefix = Column(String, nullable=True, default="INV-")
    bank_details = Column(Text, nullable=True)
    logo_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="clients")
    customers = relationship(
        "Customer", back_populates="client", cascade="all, delete-orphan"
    )
    invoices = relationship(
        "Invoice", back_populates="client", cascade="all, delete-orphan"
    )


class Customer(Base):
    """Buyer invoiced by a client; ``gstin`` is empty for B2C buyers."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    gstin = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="customers")
    invoices = relationship("Invoice", back_populates="customer", passive_deletes=True)


class Invoice(Base):
    """Invoice header with the totals of its most recent computation."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    number = Column(String, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    place_of_supply = Column(String, nullable=True)
    supply_type = Column(
        Enum(SupplyType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SupplyType.INTRA_STATE,
    )
    status = Column(
        Enum(InvoiceStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InvoiceStatus.DRAFT,
    )
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_total = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    is_b2c = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="invoices")
    customer = relationship("Customer", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
    )


class InvoiceItem(Base):
    """Priced invoice row."""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)
    hsn = Column(String, nullable=True)
    quantity = Column(Numeric(14, 4), nullable=False)
    rate = Column(Numeric(14, 4), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    gst_rate = Column(Numeric(7, 4), nullable=False)
    igst = Column(Numeric(12, 2), nullable=False, default=0)
    cgst = Column(Numeric(12, 2), nullable=False, default=0)
    sgst = Column(Numeric(12, 2), nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")


class InvoiceCounter(Base):
    """Last issued sequence number per invoice series."""

    __tablename__ = "invoice_counters"

    series = Column(String, primary_key=True)
    current = Column(Integer, nullable=False, default=0)
