"""GetInvoice and ListInvoices Use Cases

Tenant-scoped invoice reads with patient, lines and payments attached.
"""

import logging
from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import InvoiceStatus
from .dtos import InvoiceResponseDTO
from .errors import invoice_not_found
from .invoice_reader import InvoiceReader

logger = logging.getLogger(__name__)


class GetInvoice:
    """
    Use Case: Read one invoice

    An invoice of another tenant is reported as not found.
    """

    def __init__(self, invoice_repo: InvoiceRepository, reader: InvoiceReader):
        self.invoice_repo = invoice_repo
        self.reader = reader

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
            if not invoice:
                return Return.err(invoice_not_found(invoice_id))
            return Return.ok(await self.reader.assemble(invoice))
        except Exception as e:
            logger.exception(f"Failed to read invoice {invoice_id}")
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to retrieve invoice",
                    reason=str(e),
                )
            )


class ListInvoices:
    """Use Case: List invoices of a tenant, newest issue date first"""

    def __init__(self, invoice_repo: InvoiceRepository, reader: InvoiceReader):
        self.invoice_repo = invoice_repo
        self.reader = reader

    async def execute(
        self,
        tenant_id: str,
        patient_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> Result[List[InvoiceResponseDTO]]:
        try:
            invoices = await self.invoice_repo.list_by_tenant(
                tenant_id, patient_id=patient_id, status=status
            )
            return Return.ok(await self.reader.assemble_many(invoices))
        except Exception as e:
            logger.exception(f"Failed to list invoices for tenant {tenant_id}")
            return Return.err(
                Error(
                    code="LIST_INVOICES_FAILED",
                    message="Failed to list invoices",
                    reason=str(e),
                )
            )
