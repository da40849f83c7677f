"""Invoice Line Domain Entity

Billable lines of an invoice, with the third-party-payer and tax rules.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from sqlmodel import Field, Column
from sqlalchemy import ForeignKey, Numeric, String
from src.domain.base import BaseModel, UTCDateTime, generate_uuid, utc_now

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineAmounts:
    """Breakdown of a line amount"""
    line_total: Decimal
    third_party_amount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    amount: Decimal


def compute_line_amounts(
    quantity: Decimal,
    unit_price: Decimal,
    third_party_rate: Decimal,
    tax_rate: Decimal,
) -> LineAmounts:
    """
    Compute the payable amount of a line

    The third-party rate is the share covered by an insurer; tax applies to
    the remaining patient share only.
    """
    line_total = Decimal(quantity) * Decimal(unit_price)
    third_party_amount = line_total * (Decimal(third_party_rate) / HUNDRED)
    taxable_base = line_total - third_party_amount
    tax_amount = taxable_base * (Decimal(tax_rate) / HUNDRED)
    return LineAmounts(
        line_total=line_total,
        third_party_amount=third_party_amount,
        taxable_base=taxable_base,
        tax_amount=tax_amount,
        amount=taxable_base + tax_amount,
    )


class InvoiceLine(BaseModel, table=True):
    """
    Invoice Line - Individual billable line within an invoice

    Domain Rules:
    - Each line belongs to exactly one invoice (deleted with it)
    - amount = (quantity * unit_price - third party share) + tax on that base
    - Appended only while the invoice is DRAFT
    """

    __tablename__ = "invoice_lines"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Invoice line identifier"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True),
        description="Foreign key to Invoice"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Line description (e.g., 'Consultation générale')"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Quantity (> 0)"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Price per unit (>= 0)"
    )

    third_party_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(5, 2), nullable=False, default=0),
        description="Share covered by a third-party payer, percent 0-100"
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(5, 2), nullable=False, default=0),
        description="Tax rate applied to the patient share, percent"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime, nullable=False),
        description="Line creation timestamp"
    )

    def amounts(self) -> LineAmounts:
        return compute_line_amounts(
            self.quantity, self.unit_price, self.third_party_rate, self.tax_rate
        )
