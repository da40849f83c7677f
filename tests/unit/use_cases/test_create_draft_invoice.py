"""Unit tests for CreateDraftInvoice use case

Tests cover:
- Draft creation with generated number and default due date
- Caller supplied number and dates
- Repository failures
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

from src.app.use_cases.invoicing.create_draft_invoice import CreateDraftInvoice
from src.app.use_cases.invoicing.dtos import CreateInvoiceCommandDTO
from src.domain.invoice import InvoiceStatus


@pytest.fixture
def create_draft_use_case(mock_uow, mock_invoice_repo):
    mock_invoice_repo.create = AsyncMock(side_effect=lambda invoice: invoice)
    return CreateDraftInvoice(uow=mock_uow, invoice_repo=mock_invoice_repo)


@pytest.mark.asyncio
class TestCreateDraftInvoice:

    async def test_defaults(self, create_draft_use_case, mock_invoice_repo, mock_uow):
        """
        Given: Only a patient id
        When: A draft is created
        Then: Number is generated, status is DRAFT, total is 0 and due date is issue + 30 days
        """
        result = await create_draft_use_case.execute(
            "tenant_a", CreateInvoiceCommandDTO(patient_id="patient-1")
        )

        assert result.is_ok()
        response = result.value
        assert response.tenant_id == "tenant_a"
        assert response.patient_id == "patient-1"
        assert response.status == "DRAFT"
        assert response.total == Decimal("0")
        assert response.number.startswith("INV-")
        assert response.due_at - response.issue_date == timedelta(days=30)
        assert response.lines == []

        mock_invoice_repo.create.assert_called_once()
        created = mock_invoice_repo.create.call_args[0][0]
        assert created.status == InvoiceStatus.DRAFT
        mock_uow.commit.assert_called_once()

    async def test_supplied_fields_are_kept(self, create_draft_use_case):
        issue = datetime(2024, 1, 10, tzinfo=timezone.utc)
        due = datetime(2024, 1, 20, tzinfo=timezone.utc)
        command = CreateInvoiceCommandDTO(
            patient_id="patient-1",
            number="F-2024-001",
            issue_date=issue,
            due_at=due,
            encounter_id="enc-9",
            notes="Merci",
            billing_address={"city": "Dakar"},
        )

        result = await create_draft_use_case.execute("tenant_a", command)

        response = result.value
        assert response.number == "F-2024-001"
        assert response.issue_date == issue
        assert response.due_at == due
        assert response.encounter_id == "enc-9"
        assert response.notes == "Merci"
        assert response.billing_address == {"city": "Dakar"}

    async def test_configured_due_days(self, mock_uow, mock_invoice_repo):
        mock_invoice_repo.create = AsyncMock(side_effect=lambda invoice: invoice)
        use_case = CreateDraftInvoice(mock_uow, mock_invoice_repo, due_days=15)
        issue = datetime(2024, 1, 1, tzinfo=timezone.utc)

        result = await use_case.execute(
            "tenant_a", CreateInvoiceCommandDTO(patient_id="p", issue_date=issue)
        )

        assert result.value.due_at == datetime(2024, 1, 16, tzinfo=timezone.utc)

    async def test_issue_date_with_offset_is_stored_as_utc(self, create_draft_use_case):
        """
        Given: An issue date carrying a +02:00 offset and no due date
        When: The draft is created
        Then: Issue and due dates are aware UTC values 30 days apart
        """
        issue = datetime(2024, 3, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        result = await create_draft_use_case.execute(
            "tenant_a", CreateInvoiceCommandDTO(patient_id="patient-1", issue_date=issue)
        )

        response = result.value
        assert response.issue_date.tzinfo == timezone.utc
        assert response.issue_date == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
        assert response.due_at == datetime(2024, 3, 31, 8, 0, tzinfo=timezone.utc)

    async def test_naive_issue_date_is_taken_as_utc(self, create_draft_use_case):
        result = await create_draft_use_case.execute(
            "tenant_a",
            CreateInvoiceCommandDTO(patient_id="patient-1", issue_date=datetime(2024, 3, 1, 10, 0)),
        )

        assert result.value.issue_date == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    async def test_repository_failure_rolls_back(self, mock_uow, mock_invoice_repo):
        mock_invoice_repo.create = AsyncMock(side_effect=Exception("unique violation"))
        use_case = CreateDraftInvoice(mock_uow, mock_invoice_repo)

        result = await use_case.execute("tenant_a", CreateInvoiceCommandDTO(patient_id="p"))

        assert result.is_err()
        assert result.error.code == "CREATE_INVOICE_FAILED"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
