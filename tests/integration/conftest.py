import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers all tables on SQLModel.metadata
from src.adapter.services import InProcessEventPublisher
from src.depends import (
    build_invoicing_facade,
    get_event_publisher,
    get_object_storage,
    get_session,
)
from src.domain.patient import Patient
from src.domain.tenant import Tenant
from tests.fixtures.object_storage import InMemoryObjectStorage

TENANT_A = "tenant_a"
TENANT_B = "tenant_b"


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Create test database engine on an in-memory SQLite database"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(db_session):
    """Two tenants and one patient per tenant"""
    db_session.add(Tenant(id=TENANT_A, name="Clinique du Port"))
    db_session.add(Tenant(id=TENANT_B, name="Centre Médical Nord"))
    patient_a = Patient(id="patient-a", tenant_id=TENANT_A, first_name="Awa", last_name="Diop")
    patient_b = Patient(id="patient-b", tenant_id=TENANT_B, first_name="Jean", last_name="Martin")
    db_session.add(patient_a)
    db_session.add(patient_b)
    await db_session.commit()
    return {"patient_a": patient_a, "patient_b": patient_b}


@pytest_asyncio.fixture
async def storage():
    return InMemoryObjectStorage()


@pytest_asyncio.fixture
async def event_bus():
    return InProcessEventPublisher()


@pytest_asyncio.fixture
async def invoicing(db_session, storage, event_bus, seed):
    return build_invoicing_facade(db_session, storage, event_bus)


@pytest_asyncio.fixture
async def client(db_session, storage, event_bus, seed):
    """Create test client with session, storage and event overrides"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_object_storage] = lambda: storage
    app.dependency_overrides[get_event_publisher] = lambda: event_bus

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
