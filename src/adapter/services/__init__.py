from .unit_of_work import SqlAlchemyUnitOfWork
from .pdf_service import ReportLabPdfService
from .qr_service import PngQrCodeService
from .object_storage import MinioObjectStorage
from .event_publisher import (
    InProcessEventPublisher,
    LoggingEventPublisher,
    WebhookEventPublisher,
    CompositeEventPublisher,
    create_event_publisher,
)

__all__ = [
    "SqlAlchemyUnitOfWork",
    "ReportLabPdfService",
    "PngQrCodeService",
    "MinioObjectStorage",
    "InProcessEventPublisher",
    "LoggingEventPublisher",
    "WebhookEventPublisher",
    "CompositeEventPublisher",
    "create_event_publisher",
]
