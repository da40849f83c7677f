"""SendInvoice Use Case

Moves a draft invoice to SENT and publishes the invoice.sent event.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher, INVOICE_SENT
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.domain.invoice import InvalidInvoiceStateError, InvoiceStatus, ensure_can_send
from .dtos import InvoiceResponseDTO
from .errors import invalid_state, invoice_not_found
from .invoice_reader import InvoiceReader

logger = logging.getLogger(__name__)


class SendInvoice:
    """
    Use Case: Send invoice

    Business Rules:
    1. Invoice must exist for the tenant
    2. Only DRAFT invoices can be sent
    3. An invoice without lines cannot be sent
    4. invoice.sent is published after commit; delivery failures do not
       fail the transition

    Flow:
    1. Retrieve invoice and its lines
    2. Validate transition
    3. Persist status=SENT and commit
    4. Publish invoice.sent with the full invoice
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        reader: InvoiceReader,
        event_publisher: EventPublisher,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.reader = reader
        self.event_publisher = event_publisher

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
            if not invoice:
                return Return.err(invoice_not_found(invoice_id))

            lines = await self.invoice_line_repo.get_by_invoice_id(invoice.id)
            try:
                ensure_can_send(invoice.status, len(lines))
            except InvalidInvoiceStateError as e:
                return Return.err(invalid_state(str(e)))

            updated = await self.invoice_repo.update_fields(
                tenant_id, invoice.id, {"status": InvoiceStatus.SENT}
            )
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to send invoice {invoice_id}")
            return Return.err(
                Error(
                    code="SEND_INVOICE_FAILED",
                    message="Failed to send invoice",
                    reason=str(e),
                )
            )

        response = await self.reader.assemble(updated)
        logger.info(f"Invoice {response.number} sent (tenant {tenant_id})")

        try:
            await self.event_publisher.publish(INVOICE_SENT, response.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Failed to publish {INVOICE_SENT} for invoice {invoice_id}: {e}")

        return Return.ok(response)
