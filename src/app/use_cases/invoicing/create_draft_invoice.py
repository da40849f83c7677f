"""CreateDraftInvoice Use Case

Creates an invoice in DRAFT status for a patient.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.base import as_utc, utc_now
from src.domain.invoice import (
    DEFAULT_DUE_DAYS,
    Invoice,
    InvoiceStatus,
    default_due_at,
    generate_invoice_number,
)
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO
from .invoice_reader import to_invoice_dto

logger = logging.getLogger(__name__)


class CreateDraftInvoice:
    """
    Use Case: Create draft invoice

    Business Rules:
    1. Invoice number is generated (time based) when not supplied
    2. Issue date defaults to now, due date to issue date + 30 days
    3. Invoice is created with status=DRAFT and total=0
    4. Patient existence is not checked here

    Flow:
    1. Resolve defaults
    2. Create invoice with status=DRAFT
    3. Commit transaction
    4. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        due_days: int = DEFAULT_DUE_DAYS,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.due_days = due_days

    async def execute(
        self, tenant_id: str, command: CreateInvoiceCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        """
        Execute draft creation

        Args:
            tenant_id: Tenant owning the invoice
            command: CreateInvoiceCommandDTO with patient and optional fields

        Returns:
            Result[InvoiceResponseDTO]: Success with the draft or error
        """
        try:
            now = utc_now()
            issue_date = as_utc(command.issue_date) or now

            invoice = Invoice(
                tenant_id=tenant_id,
                patient_id=command.patient_id,
                number=command.number or generate_invoice_number(now),
                status=InvoiceStatus.DRAFT,
                issue_date=issue_date,
                due_at=as_utc(command.due_at) or default_due_at(issue_date, self.due_days),
                encounter_id=command.encounter_id,
                billing_address=command.billing_address,
                notes=command.notes,
            )

            created_invoice = await self.invoice_repo.create(invoice)
            await self.uow.commit()

            logger.info(
                f"Created draft invoice {created_invoice.number} "
                f"(id={created_invoice.id}) for tenant {tenant_id}"
            )
            return Return.ok(to_invoice_dto(created_invoice))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to create invoice for tenant {tenant_id}")
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
