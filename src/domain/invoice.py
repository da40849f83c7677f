"""Invoice Domain Entity

Tracks patient invoices, their lifecycle status and generated artifacts.
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, UTCDateTime, generate_uuid, utc_now
from src.domain.invoice_line import InvoiceLine

DEFAULT_DUE_DAYS = 30


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"  # reserved for partial payment application
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


# Allowed lifecycle moves. PAID is handled separately by mark_paid, which
# accepts any prior status.
TRANSITIONS = {
    InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.CANCELLED},
    InvoiceStatus.SENT: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED},
    InvoiceStatus.OVERDUE: {InvoiceStatus.PAID},
    InvoiceStatus.PARTIALLY_PAID: {InvoiceStatus.PAID},
    InvoiceStatus.PAID: set(),
    InvoiceStatus.CANCELLED: set(),
}


class InvalidInvoiceStateError(Exception):
    """Raised when an operation violates an invoice business rule"""


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    return target in TRANSITIONS.get(current, set())


def ensure_can_add_lines(status: InvoiceStatus) -> None:
    if status != InvoiceStatus.DRAFT:
        raise InvalidInvoiceStateError(
            "Cannot add lines to an invoice that is not in DRAFT status"
        )


def ensure_can_send(status: InvoiceStatus, line_count: int) -> None:
    """
    Guard the DRAFT -> SENT transition

    Raises:
        InvalidInvoiceStateError: status is not DRAFT or invoice has no lines
    """
    if not can_transition(status, InvoiceStatus.SENT):
        raise InvalidInvoiceStateError("Only invoices in DRAFT status can be sent")
    if line_count == 0:
        raise InvalidInvoiceStateError("Cannot send an invoice without lines")


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """
    Generate a time-based invoice number

    Format: INV-YYYYMMDDHHMMSSffffff-XXXX, the random suffix keeps numbers
    unique for creations within the same microsecond.
    """
    now = now or utc_now()
    return f"INV-{now.strftime('%Y%m%d%H%M%S%f')}-{uuid.uuid4().hex[:4].upper()}"


def default_due_at(issue_date: datetime, days: int = DEFAULT_DUE_DAYS) -> datetime:
    return issue_date + timedelta(days=days)


def compute_invoice_total(lines: Iterable[InvoiceLine]) -> Decimal:
    """Sum of the computed amounts of all lines (0 for no lines)"""
    return sum((line.amounts().amount for line in lines), Decimal("0"))


class Invoice(BaseModel, table=True):
    """
    Invoice - Patient invoice for a tenant

    Domain Rules:
    - number is unique per tenant
    - Status transitions: DRAFT -> SENT -> PAID / OVERDUE, OVERDUE -> PAID
    - Lines can only be added while DRAFT
    - total is the sum of all invoice_lines amounts, set only by recalculation
    - pdf_path / qr_path point to the latest generated artifacts
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_tenant_status', 'tenant_id', 'status'),
        UniqueConstraint('tenant_id', 'number', name='uq_invoices_tenant_number'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Invoice identifier"
    )

    tenant_id: str = Field(
        index=True,
        description="Tenant ID (partition key of every query)"
    )

    number: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Human readable invoice number, unique per tenant"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Invoice status"
    )

    issue_date: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime, nullable=False),
        description="Issue date"
    )

    due_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        description="Due date (defaults to issue date + 30 days)"
    )

    total: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Sum of line amounts (precision: 18,6)"
    )

    notes: Optional[str] = Field(default=None)

    billing_address: Optional[dict] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Structured billing address"
    )

    patient_id: Optional[str] = Field(
        default=None,
        index=True,
        description="Reference to the billed patient"
    )

    encounter_id: Optional[str] = Field(
        default=None,
        description="Reference to the originating encounter"
    )

    pdf_path: Optional[str] = Field(
        default=None,
        description="Object store key of the latest PDF"
    )

    qr_path: Optional[str] = Field(
        default=None,
        description="Object store key of the latest QR image"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime, nullable=False),
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime, nullable=False),
        description="Last update timestamp"
    )
