"""RemindOverdueInvoices Use Case

Sweeps SENT invoices past their due date to OVERDUE.
"""

import logging
from datetime import datetime
from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.base import utc_now
from .dtos import InvoiceResponseDTO
from .invoice_reader import InvoiceReader

logger = logging.getLogger(__name__)


class RemindOverdueInvoices:
    """
    Use Case: Overdue sweep for one tenant

    Business Rules:
    1. Only SENT invoices with due_at < now are updated
    2. Re-running is safe: already OVERDUE invoices no longer match

    Flow:
    1. Update matching invoices to OVERDUE in one statement
    2. Commit
    3. Return the updated invoices
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

    async def execute(
        self, tenant_id: str, now: Optional[datetime] = None
    ) -> Result[List[InvoiceResponseDTO]]:
        try:
            now = now or utc_now()
            updated = await self.invoice_repo.mark_overdue(tenant_id, now)
            await self.uow.commit()

            if updated:
                logger.info(
                    f"Marked {len(updated)} invoice(s) OVERDUE for tenant {tenant_id}"
                )
            return Return.ok(await self.reader.assemble_many(updated))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Overdue sweep failed for tenant {tenant_id}")
            return Return.err(
                Error(
                    code="REMIND_OVERDUE_FAILED",
                    message="Failed to run overdue reminder",
                    reason=str(e),
                )
            )
