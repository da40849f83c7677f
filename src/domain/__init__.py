from .base import BaseModel, generate_uuid
from .tenant import Tenant
from .patient import Patient
from .invoice import (
    Invoice,
    InvoiceStatus,
    InvalidInvoiceStateError,
    compute_invoice_total,
    generate_invoice_number,
)
from .invoice_line import InvoiceLine, LineAmounts, compute_line_amounts
from .payment import Payment, PaymentMethod

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Tenant",
    "Patient",
    "Invoice",
    "InvoiceStatus",
    "InvalidInvoiceStateError",
    "compute_invoice_total",
    "generate_invoice_number",
    "InvoiceLine",
    "LineAmounts",
    "compute_line_amounts",
    "Payment",
    "PaymentMethod",
]
