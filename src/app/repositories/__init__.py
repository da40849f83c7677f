from .invoice_repository import InvoiceRepository
from .invoice_line_repository import InvoiceLineRepository
from .payment_repository import PaymentRepository
from .patient_repository import PatientRepository
from .tenant_repository import TenantRepository

__all__ = [
    "InvoiceRepository",
    "InvoiceLineRepository",
    "PaymentRepository",
    "PatientRepository",
    "TenantRepository",
]
