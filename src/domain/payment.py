"""Payment Domain Entity

Payments recorded against an invoice. Attached to invoice reads; recording
payments is handled outside the invoicing core.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import ForeignKey, Numeric, String
from src.domain.base import BaseModel, UTCDateTime, generate_uuid, utc_now


class PaymentMethod(str, Enum):
    """Payment method types"""
    CASH = "CASH"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"
    INSURANCE = "INSURANCE"


class Payment(BaseModel, table=True):
    """Payment - amount settled on an invoice"""

    __tablename__ = "payments"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Payment identifier"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True),
        description="Foreign key to Invoice"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Paid amount"
    )

    method: PaymentMethod = Field(
        default=PaymentMethod.CASH,
        description="Payment method"
    )

    paid_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime, nullable=False),
        description="Payment timestamp"
    )

    reference: Optional[str] = Field(
        default=None,
        description="External reference (receipt, transfer id, ...)"
    )
