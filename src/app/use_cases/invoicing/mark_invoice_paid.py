"""MarkInvoicePaid Use Case

Sets an invoice status to PAID.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import InvoiceStatus
from .dtos import InvoiceResponseDTO
from .errors import invoice_not_found
from .invoice_reader import InvoiceReader

logger = logging.getLogger(__name__)


class MarkInvoicePaid:
    """
    Use Case: Mark invoice as paid

    Business Rules:
    1. Invoice must exist for the tenant
    2. Any prior status is accepted (existing clients rely on it)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        reader: InvoiceReader,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.reader = reader

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
            if not invoice:
                return Return.err(invoice_not_found(invoice_id))

            if invoice.status not in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE):
                logger.warning(
                    f"Invoice {invoice.number} marked PAID from status {invoice.status.value}"
                )

            updated = await self.invoice_repo.update_fields(
                tenant_id, invoice.id, {"status": InvoiceStatus.PAID}
            )
            await self.uow.commit()

            logger.info(f"Invoice {updated.number} marked PAID (tenant {tenant_id})")
            return Return.ok(await self.reader.assemble(updated))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to mark invoice {invoice_id} as paid")
            return Return.err(
                Error(
                    code="MARK_PAID_FAILED",
                    message="Failed to mark invoice as paid",
                    reason=str(e),
                )
            )
