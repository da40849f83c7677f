"""UpdateInvoice and DeleteInvoice Use Cases

Peripheral record maintenance. Status, total and artifact paths are never
written here.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.base import as_utc, utc_now
from .dtos import InvoiceResponseDTO, UpdateInvoiceCommandDTO
from .errors import invoice_not_found
from .invoice_reader import InvoiceReader

logger = logging.getLogger(__name__)


class UpdateInvoice:
    """Use Case: Update editable invoice fields"""

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        reader: InvoiceReader,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.reader = reader

    async def execute(
        self, tenant_id: str, invoice_id: str, command: UpdateInvoiceCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        try:
            values = command.model_dump(exclude_unset=True)
            for key in ("issue_date", "due_at"):
                if values.get(key) is not None:
                    values[key] = as_utc(values[key])
            if values:
                values["updated_at"] = utc_now()
                invoice = await self.invoice_repo.update_fields(tenant_id, invoice_id, values)
            else:
                invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)

            if not invoice:
                await self.uow.rollback()
                return Return.err(invoice_not_found(invoice_id))

            await self.uow.commit()
            return Return.ok(await self.reader.assemble(invoice))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to update invoice {invoice_id}")
            return Return.err(
                Error(
                    code="UPDATE_INVOICE_FAILED",
                    message="Failed to update invoice",
                    reason=str(e),
                )
            )


class DeleteInvoice:
    """Use Case: Delete an invoice with its lines and payments"""

    def __init__(self, uow: UnitOfWork, invoice_repo: InvoiceRepository):
        self.uow = uow
        self.invoice_repo = invoice_repo

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[bool]:
        try:
            deleted = await self.invoice_repo.delete(tenant_id, invoice_id)
            if not deleted:
                return Return.err(invoice_not_found(invoice_id))

            await self.uow.commit()
            logger.info(f"Deleted invoice {invoice_id} (tenant {tenant_id})")
            return Return.ok(True)

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to delete invoice {invoice_id}")
            return Return.err(
                Error(
                    code="DELETE_INVOICE_FAILED",
                    message="Failed to delete invoice",
                    reason=str(e),
                )
            )
