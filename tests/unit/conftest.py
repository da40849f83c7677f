import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoicing.invoice_reader import to_invoice_dto
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_line import InvoiceLine


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def mock_invoice_repo():
    return MagicMock()


@pytest.fixture
def mock_invoice_line_repo():
    return MagicMock()


@pytest.fixture
def mock_reader():
    """Reader building responses without related records"""
    reader = MagicMock()
    reader.assemble = AsyncMock(side_effect=lambda invoice: to_invoice_dto(invoice))
    reader.assemble_many = AsyncMock(
        side_effect=lambda invoices: [to_invoice_dto(invoice) for invoice in invoices]
    )
    return reader


@pytest.fixture
def make_invoice():
    """Factory for in-memory invoices"""

    def _make(**overrides):
        issue_date = datetime(2024, 2, 1, 9, 30)
        values = dict(
            id="inv-1",
            tenant_id="tenant_a",
            number="INV-2024-0001",
            status=InvoiceStatus.DRAFT,
            issue_date=issue_date,
            due_at=issue_date + timedelta(days=30),
            total=Decimal("0"),
            patient_id="patient-1",
            created_at=issue_date,
            updated_at=issue_date,
        )
        values.update(overrides)
        return Invoice(**values)

    return _make


@pytest.fixture
def make_line():
    def _make(**overrides):
        values = dict(
            invoice_id="inv-1",
            description="Consultation",
            quantity=Decimal("3"),
            unit_price=Decimal("100"),
            third_party_rate=Decimal("20"),
            tax_rate=Decimal("10"),
        )
        values.update(overrides)
        return InvoiceLine(**values)

    return _make
