from .unit_of_work import UnitOfWork
from .object_storage import ObjectStorage, ObjectStorageError
from .pdf_service import PdfService, PdfRenderingError
from .qr_service import QrCodeService
from .event_publisher import EventPublisher, INVOICE_SENT

__all__ = [
    "UnitOfWork",
    "ObjectStorage",
    "ObjectStorageError",
    "PdfService",
    "PdfRenderingError",
    "QrCodeService",
    "EventPublisher",
    "INVOICE_SENT",
]
