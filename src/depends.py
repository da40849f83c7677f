from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyInvoiceLineRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPatientRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyTenantRepository,
)
from src.adapter.services import (
    InProcessEventPublisher,
    MinioObjectStorage,
    PngQrCodeService,
    ReportLabPdfService,
    SqlAlchemyUnitOfWork,
    create_event_publisher,
)
from src.app.services.event_publisher import EventPublisher
from src.app.services.object_storage import ObjectStorage
from src.app.use_cases.invoicing import InvoicingFacade

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Subscribers (notifications, audit, ...) register on this bus at startup.
event_bus = InProcessEventPublisher()

_object_storage: Optional[ObjectStorage] = None
_event_publisher: Optional[EventPublisher] = None


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_object_storage() -> ObjectStorage:
    global _object_storage
    if _object_storage is None:
        _object_storage = MinioObjectStorage.from_config(ApplicationConfig)
    return _object_storage


def get_event_publisher() -> EventPublisher:
    global _event_publisher
    if _event_publisher is None:
        _event_publisher = create_event_publisher(
            webhook_url=ApplicationConfig.EVENT_WEBHOOK_URL,
            in_process=event_bus,
        )
    return _event_publisher


def build_invoicing_facade(
    session: AsyncSession,
    storage: ObjectStorage,
    event_publisher: EventPublisher,
) -> InvoicingFacade:
    return InvoicingFacade(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        invoice_line_repo=SqlAlchemyInvoiceLineRepository(session),
        patient_repo=SqlAlchemyPatientRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        tenant_repo=SqlAlchemyTenantRepository(session),
        pdf_service=ReportLabPdfService(
            currency_suffix=ApplicationConfig.CURRENCY_SUFFIX,
            default_clinic_name=ApplicationConfig.DEFAULT_CLINIC_NAME,
        ),
        qr_service=PngQrCodeService(),
        storage=storage,
        event_publisher=event_publisher,
        bucket=ApplicationConfig.INVOICE_BUCKET,
        due_days=ApplicationConfig.INVOICE_DUE_DAYS,
    )


async def get_invoicing(
    session: AsyncSession = Depends(get_session),
    storage: ObjectStorage = Depends(get_object_storage),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> InvoicingFacade:
    return build_invoicing_facade(session, storage, event_publisher)


async def get_tenant_id(x_tenant_id: Optional[str] = Header(default=None)) -> str:
    """
    Tenant of the authenticated caller

    The authentication gateway in front of the service sets X-Tenant-Id.
    """
    if not x_tenant_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing tenant context",
        )
    return x_tenant_id
