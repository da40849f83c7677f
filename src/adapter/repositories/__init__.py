from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_line_repository import SqlAlchemyInvoiceLineRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .patient_repository import SqlAlchemyPatientRepository
from .tenant_repository import SqlAlchemyTenantRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceLineRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyPatientRepository",
    "SqlAlchemyTenantRepository",
]
