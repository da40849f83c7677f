"""DownloadInvoicePdf Use Case

Returns the stored invoice PDF, generating it first when none exists.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.object_storage import ObjectStorage, ObjectStorageError
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import InvoicePdfDTO
from .errors import STORAGE_FAILURE, invoice_not_found
from .generate_invoice_pdf import DEFAULT_BUCKET, GenerateInvoicePdf

logger = logging.getLogger(__name__)


class DownloadInvoicePdf:
    """
    Use Case: Download invoice PDF

    Business Rules:
    1. Invoice must exist for the tenant
    2. If no PDF was ever generated (pdf_path is None) it is generated now
    3. Storage failures are reported as STORAGE_FAILURE (safe to retry)
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        storage: ObjectStorage,
        generate_pdf: GenerateInvoicePdf,
        bucket: str = DEFAULT_BUCKET,
    ):
        self.invoice_repo = invoice_repo
        self.storage = storage
        self.generate_pdf = generate_pdf
        self.bucket = bucket

    async def execute(self, tenant_id: str, invoice_id: str) -> Result[InvoicePdfDTO]:
        invoice = await self.invoice_repo.get_by_id(tenant_id, invoice_id)
        if not invoice:
            return Return.err(invoice_not_found(invoice_id))

        pdf_path = invoice.pdf_path
        if not pdf_path:
            logger.info(f"No PDF stored for invoice {invoice.number}, generating it")
            generated = await self.generate_pdf.execute(tenant_id, invoice_id)
            if generated.is_err():
                return generated
            pdf_path = generated.value.pdf_path

        try:
            content = await self.storage.download(self.bucket, pdf_path)
        except ObjectStorageError as e:
            logger.error(f"Failed to fetch {pdf_path} for invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code=STORAGE_FAILURE,
                    message="Failed to download invoice PDF",
                    reason=str(e),
                )
            )

        return Return.ok(
            InvoicePdfDTO(invoice_id=invoice.id, number=invoice.number, content=content)
        )
