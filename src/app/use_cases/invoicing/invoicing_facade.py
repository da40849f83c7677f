"""Invoicing Facade

Single entry point used by the API layer and workers. Every operation takes
the caller's tenant id and only touches that tenant's invoices.
"""

from datetime import datetime
from typing import List, Optional
from libs.result import Result
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.services.object_storage import ObjectStorage
from src.app.services.pdf_service import PdfService
from src.app.services.qr_service import QrCodeService
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.patient_repository import PatientRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.tenant_repository import TenantRepository
from src.domain.invoice import DEFAULT_DUE_DAYS, InvoiceStatus
from .add_invoice_line import AddInvoiceLine
from .create_draft_invoice import CreateDraftInvoice
from .download_invoice_pdf import DownloadInvoicePdf
from .dtos import (
    AddInvoiceLineCommandDTO,
    CreateInvoiceCommandDTO,
    InvoicePdfDTO,
    InvoiceResponseDTO,
    PdfArtifactDTO,
    UpdateInvoiceCommandDTO,
)
from .generate_invoice_pdf import DEFAULT_BUCKET, GenerateInvoicePdf
from .get_invoice import GetInvoice, ListInvoices
from .invoice_locks import InvoiceLocks, invoice_locks
from .invoice_reader import InvoiceReader
from .mark_invoice_paid import MarkInvoicePaid
from .remind_overdue_invoices import RemindOverdueInvoices
from .send_invoice import SendInvoice
from .update_invoice import DeleteInvoice, UpdateInvoice


class InvoicingFacade:
    """
    Facade over the invoicing use cases

    add_line, generate_pdf and download_pdf hold a per-invoice lock so that
    concurrent calls on the same invoice run one after the other; other
    invoices and tenants are not blocked.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        patient_repo: PatientRepository,
        payment_repo: PaymentRepository,
        tenant_repo: TenantRepository,
        pdf_service: PdfService,
        qr_service: QrCodeService,
        storage: ObjectStorage,
        event_publisher: EventPublisher,
        bucket: str = DEFAULT_BUCKET,
        due_days: int = DEFAULT_DUE_DAYS,
        locks: Optional[InvoiceLocks] = None,
    ):
        self.locks = locks or invoice_locks
        reader = InvoiceReader(invoice_line_repo, patient_repo, payment_repo)

        self._create_draft = CreateDraftInvoice(uow, invoice_repo, due_days=due_days)
        self._add_line = AddInvoiceLine(uow, invoice_repo, invoice_line_repo, reader)
        self._send = SendInvoice(uow, invoice_repo, invoice_line_repo, reader, event_publisher)
        self._mark_paid = MarkInvoicePaid(uow, invoice_repo, reader)
        self._remind_overdue = RemindOverdueInvoices(uow, invoice_repo, reader)
        self._generate_pdf = GenerateInvoicePdf(
            uow,
            invoice_repo,
            invoice_line_repo,
            patient_repo,
            tenant_repo,
            pdf_service,
            qr_service,
            storage,
            bucket=bucket,
        )
        self._download_pdf = DownloadInvoicePdf(
            invoice_repo, storage, self._generate_pdf, bucket=bucket
        )
        self._get = GetInvoice(invoice_repo, reader)
        self._list = ListInvoices(invoice_repo, reader)
        self._update = UpdateInvoice(uow, invoice_repo, reader)
        self._delete = DeleteInvoice(uow, invoice_repo)

    async def create_draft(
        self, tenant_id: str, command: CreateInvoiceCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        return await self._create_draft.execute(tenant_id, command)

    async def add_line(
        self, tenant_id: str, command: AddInvoiceLineCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        async with self.locks.for_invoice(command.invoice_id):
            return await self._add_line.execute(tenant_id, command)

    async def send(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        return await self._send.execute(tenant_id, invoice_id)

    async def mark_paid(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        return await self._mark_paid.execute(tenant_id, invoice_id)

    async def remind_overdue(
        self, tenant_id: str, now: Optional[datetime] = None
    ) -> Result[List[InvoiceResponseDTO]]:
        return await self._remind_overdue.execute(tenant_id, now=now)

    async def generate_pdf(self, invoice_id: str, tenant_id: str) -> Result[PdfArtifactDTO]:
        async with self.locks.for_invoice(invoice_id):
            return await self._generate_pdf.execute(tenant_id, invoice_id)

    async def download_pdf(self, invoice_id: str, tenant_id: str) -> Result[InvoicePdfDTO]:
        async with self.locks.for_invoice(invoice_id):
            return await self._download_pdf.execute(tenant_id, invoice_id)

    async def find_all(
        self,
        tenant_id: str,
        patient_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> Result[List[InvoiceResponseDTO]]:
        return await self._list.execute(tenant_id, patient_id=patient_id, status=status)

    async def find_one(self, tenant_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        return await self._get.execute(tenant_id, invoice_id)

    async def update(
        self, tenant_id: str, invoice_id: str, command: UpdateInvoiceCommandDTO
    ) -> Result[InvoiceResponseDTO]:
        return await self._update.execute(tenant_id, invoice_id, command)

    async def delete(self, tenant_id: str, invoice_id: str) -> Result[bool]:
        return await self._delete.execute(tenant_id, invoice_id)
