"""AddInvoiceLine Use Case

Appends a billable line to a draft invoice and recomputes its total.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.domain.invoice import InvalidInvoiceStateError, ensure_can_add_lines
from src.domain.invoice_line import InvoiceLine
from .dtos import AddInvoiceLineCommandDTO, InvoiceResponseDTO
from .errors import invalid_state, invoice_not_found
from .invoice_reader import InvoiceReader
from .recalculate_total import recalculate_total

logger = logging.getLogger(__name__)


class AddInvoiceLine:
    """
    Use Case: Add a line to an invoice

    Business Rules:
    1. Invoice must exist for the tenant
    2. Invoice must be DRAFT
    3. total is recomputed from all lines, including the new one

    Flow:
    1. Retrieve invoice (tenant scoped)
    2. Validate status
    3. Persist line
    4. Recalculate and persist total
    5. Commit and return the invoice with its lines
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        reader: InvoiceReader,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.reader = reader

    async def execute(
        self, tenant_id: str, command: AddInvoiceLineCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, command.invoice_id)
            if not invoice:
                return Return.err(invoice_not_found(command.invoice_id))

            try:
                ensure_can_add_lines(invoice.status)
            except InvalidInvoiceStateError as e:
                return Return.err(invalid_state(str(e)))

            await self.invoice_line_repo.create(
                InvoiceLine(
                    invoice_id=invoice.id,
                    description=command.description,
                    quantity=command.quantity,
                    unit_price=command.unit_price,
                    third_party_rate=command.third_party_rate,
                    tax_rate=command.tax_rate,
                )
            )

            updated = await recalculate_total(
                self.invoice_repo, self.invoice_line_repo, tenant_id, invoice.id
            )
            await self.uow.commit()

            logger.info(
                f"Added line to invoice {updated.number}, new total {updated.total}"
            )
            return Return.ok(await self.reader.assemble(updated))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to add line to invoice {command.invoice_id}")
            return Return.err(
                Error(
                    code="ADD_INVOICE_LINE_FAILED",
                    message="Failed to add invoice line",
                    reason=str(e),
                )
            )
