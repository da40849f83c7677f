"""Unit tests for RemindOverdueInvoices use case"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock

from src.app.use_cases.invoicing.remind_overdue_invoices import RemindOverdueInvoices
from src.domain.invoice import InvoiceStatus


@pytest.fixture
def remind_use_case(mock_uow, mock_invoice_repo, mock_reader):
    return RemindOverdueInvoices(mock_uow, mock_invoice_repo, mock_reader)


@pytest.mark.asyncio
class TestRemindOverdueInvoices:

    async def test_returns_updated_invoices(
        self, remind_use_case, mock_invoice_repo, mock_uow, make_invoice
    ):
        now = datetime(2024, 6, 1)
        mock_invoice_repo.mark_overdue = AsyncMock(
            return_value=[
                make_invoice(id="inv-1", status=InvoiceStatus.OVERDUE),
                make_invoice(id="inv-2", number="INV-2", status=InvoiceStatus.OVERDUE),
            ]
        )

        result = await remind_use_case.execute("tenant_a", now=now)

        assert result.is_ok()
        assert [invoice.id for invoice in result.value] == ["inv-1", "inv-2"]
        assert all(invoice.status == "OVERDUE" for invoice in result.value)
        mock_invoice_repo.mark_overdue.assert_called_once_with("tenant_a", now)
        mock_uow.commit.assert_called_once()

    async def test_nothing_to_update(self, remind_use_case, mock_invoice_repo):
        mock_invoice_repo.mark_overdue = AsyncMock(return_value=[])

        result = await remind_use_case.execute("tenant_a")

        assert result.is_ok()
        assert result.value == []

    async def test_failure_rolls_back(self, remind_use_case, mock_invoice_repo, mock_uow):
        mock_invoice_repo.mark_overdue = AsyncMock(side_effect=Exception("deadlock"))

        result = await remind_use_case.execute("tenant_a")

        assert result.is_err()
        assert result.error.code == "REMIND_OVERDUE_FAILED"
        mock_uow.rollback.assert_called_once()
