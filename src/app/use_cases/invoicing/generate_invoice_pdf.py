"""GenerateInvoicePdf Use Case

Renders the invoice PDF and its authentication QR code, stores both in the
object store and points the invoice at them.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.object_storage import ObjectStorage, ObjectStorageError
from src.app.services.pdf_service import PdfService
from src.app.services.qr_service import QrCodeService
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.patient_repository import PatientRepository
from src.app.repositories.tenant_repository import TenantRepository
from src.domain.base import utc_now
from src.domain.invoice import Invoice
from .dtos import PdfArtifactDTO, QrAuthenticationPayload
from .errors import RENDERING_FAILURE, STORAGE_FAILURE, invoice_not_found

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "medical-invoices"


def qr_object_path(tenant_id: str, invoice_id: str) -> str:
    return f"{tenant_id}/invoices/qr/{invoice_id}.png"


def pdf_object_path(tenant_id: str, invoice_id: str) -> str:
    return f"{tenant_id}/invoices/pdf/{invoice_id}.pdf"


def build_qr_payload(invoice: Invoice, generated_at: datetime) -> str:
    """JSON text encoded in the QR code"""
    return QrAuthenticationPayload(
        invoice_id=invoice.id,
        invoice_number=invoice.number,
        patient_id=invoice.patient_id,
        total=invoice.total,
        issue_date=invoice.issue_date,
        timestamp=generated_at,
    ).model_dump_json(by_alias=True)


class GenerateInvoicePdf:
    """
    Use Case: Generate invoice PDF and QR artifacts

    Business Rules:
    1. Invoice must exist for the tenant (any status)
    2. Artifacts are stored under deterministic per-tenant paths
    3. The invoice only points at the new paths once both uploads succeeded
    4. Previous artifacts are removed afterwards; cleanup failures are
       logged and do not fail the call

    Flow:
    1. Load invoice, lines, patient and tenant
    2. Encode QR payload and render the PDF
    3. Upload QR image then PDF
    4. Persist pdf_path / qr_path and commit
    5. Remove superseded artifacts
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_line_repo: InvoiceLineRepository,
        patient_repo: PatientRepository,
        tenant_repo: TenantRepository,
        pdf_service: PdfService,
        qr_service: QrCodeService,
        storage: ObjectStorage,
        bucket: str = DEFAULT_BUCKET,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_line_repo = invoice_line_repo
        self.patient_repo = patient_repo
        self.tenant_repo = tenant_repo
        self.pdf_service = pdf_service
        self.qr_service = qr_service
        self.storage = storage
        self.bucket = bucket

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[PdfArtifactDTO]:
        # Step 1: Load data
        try:
            invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
            if not invoice:
                return Return.err(invoice_not_found(invoice_id))

            lines = await self.invoice_line_repo.get_by_invoice_id(invoice.id)
            patient = (
                await self.patient_repo.get_by_id(tenant_id, invoice.patient_id)
                if invoice.patient_id
                else None
            )
            tenant = await self.tenant_repo.get_by_id(tenant_id)
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to load invoice {invoice_id} for PDF generation")
            return Return.err(
                Error(
                    code="GENERATE_PDF_FAILED",
                    message="Failed to generate invoice PDF",
                    reason=str(e),
                )
            )

        old_pdf_path, old_qr_path = invoice.pdf_path, invoice.qr_path
        generated_at = utc_now()

        # Step 2: Render artifacts
        try:
            qr_png = await asyncio.to_thread(
                self.qr_service.encode_png, build_qr_payload(invoice, generated_at)
            )
            pdf_bytes = await asyncio.to_thread(
                self.pdf_service.render_invoice,
                invoice,
                lines,
                patient,
                qr_png,
                tenant.name if tenant else None,
                generated_at,
            )
        except Exception as e:
            logger.error(f"Rendering failed for invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code=RENDERING_FAILURE,
                    message="Failed to render invoice PDF",
                    reason=str(e),
                )
            )

        # Step 3: Upload
        qr_path = qr_object_path(tenant_id, invoice.id)
        pdf_path = pdf_object_path(tenant_id, invoice.id)
        metadata = {"X-Invoice-Id": invoice.id, "X-Tenant-Id": tenant_id}
        try:
            await self.storage.upload(self.bucket, qr_path, qr_png, "image/png", metadata)
            await self.storage.upload(self.bucket, pdf_path, pdf_bytes, "application/pdf", metadata)
        except ObjectStorageError as e:
            logger.error(f"Upload failed for invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code=STORAGE_FAILURE,
                    message="Failed to store invoice PDF",
                    reason=str(e),
                )
            )

        # Step 4: Point the invoice at the new artifacts
        try:
            await self.invoice_repo.update_fields(
                tenant_id,
                invoice.id,
                {"pdf_path": pdf_path, "qr_path": qr_path, "updated_at": generated_at},
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Failed to persist artifact paths for invoice {invoice_id}")
            return Return.err(
                Error(
                    code="GENERATE_PDF_FAILED",
                    message="Failed to generate invoice PDF",
                    reason=str(e),
                )
            )

        logger.info(
            f"Generated PDF for invoice {invoice.number}: {pdf_path}, {qr_path} "
            f"({len(pdf_bytes)} bytes)"
        )

        # Step 5: Remove superseded artifacts
        for old_path, new_path in ((old_pdf_path, pdf_path), (old_qr_path, qr_path)):
            await self._remove_stale(old_path, new_path)

        return Return.ok(
            PdfArtifactDTO(
                invoice_id=invoice.id,
                pdf_path=pdf_path,
                qr_path=qr_path,
                generated_at=generated_at,
            )
        )

    async def _remove_stale(self, old_path: Optional[str], new_path: str) -> None:
        # Same key means the upload already replaced the object.
        if not old_path or old_path == new_path:
            return
        try:
            if await self.storage.exists(self.bucket, old_path):
                await self.storage.remove(self.bucket, old_path)
                logger.info(f"Removed stale artifact {old_path}")
        except ObjectStorageError as e:
            logger.warning(f"Could not remove stale artifact {old_path}: {e}")
