"""Integration tests for the invoice lifecycle on a real database"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from src.adapter.repositories import SqlAlchemyInvoiceLineRepository, SqlAlchemyInvoiceRepository
from src.app.use_cases.invoicing.dtos import (
    AddInvoiceLineCommandDTO,
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
)
from src.app.use_cases.invoicing.recalculate_total import recalculate_total
from src.domain.invoice import InvoiceStatus
from src.domain.payment import Payment, PaymentMethod


def consultation(invoice_id):
    return AddInvoiceLineCommandDTO(
        invoice_id=invoice_id,
        description="Consultation générale",
        quantity=Decimal("3"),
        unit_price=Decimal("100"),
        third_party_rate=Decimal("20"),
        tax_rate=Decimal("10"),
    )


def dressing(invoice_id):
    return AddInvoiceLineCommandDTO(
        invoice_id=invoice_id,
        description="Pansement",
        quantity=Decimal("1"),
        unit_price=Decimal("50"),
    )


async def create_draft(invoicing, tenant_id="tenant_a", patient_id="patient-a", **fields):
    result = await invoicing.create_draft(
        tenant_id, CreateInvoiceCommandDTO(patient_id=patient_id, **fields)
    )
    assert result.is_ok(), result
    return result.value


class TestInvoiceTotals:

    @pytest.mark.asyncio
    async def test_total_is_sum_of_line_amounts(self, invoicing):
        """
        Given: A draft invoice
        When: Lines of 264 and 50 are added
        Then: The total is 314 and stays 314 when recalculated again
        """
        draft = await create_draft(invoicing)
        assert draft.total == Decimal("0")

        first = await invoicing.add_line("tenant_a", consultation(draft.id))
        assert first.value.total == Decimal("264")
        assert first.value.lines[0].amount == Decimal("264")

        second = await invoicing.add_line("tenant_a", dressing(draft.id))
        assert second.is_ok()
        assert second.value.total == Decimal("314")
        assert len(second.value.lines) == 2

    @pytest.mark.asyncio
    async def test_recalculation_is_idempotent(self, invoicing, db_session):
        draft = await create_draft(invoicing)
        await invoicing.add_line("tenant_a", consultation(draft.id))
        await invoicing.add_line("tenant_a", dressing(draft.id))

        invoice_repo = SqlAlchemyInvoiceRepository(db_session)
        line_repo = SqlAlchemyInvoiceLineRepository(db_session)
        once = await recalculate_total(invoice_repo, line_repo, "tenant_a", draft.id)
        twice = await recalculate_total(invoice_repo, line_repo, "tenant_a", draft.id)

        assert once.total == Decimal("314")
        assert twice.total == Decimal("314")


class TestStatusMachine:

    @pytest.mark.asyncio
    async def test_cannot_send_without_lines(self, invoicing):
        draft = await create_draft(invoicing)

        result = await invoicing.send("tenant_a", draft.id)

        assert result.is_err()
        assert result.error.code == "INVALID_INVOICE_STATE"
        assert result.error.message == "Cannot send an invoice without lines"
        assert (await invoicing.find_one("tenant_a", draft.id)).value.status == "DRAFT"

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, invoicing, event_bus):
        """
        Given: A draft invoice with one line, due yesterday
        When: It is sent, swept twice and paid
        Then: SENT -> OVERDUE -> PAID, the second sweep changes nothing
        """
        received = []

        async def on_sent(payload):
            received.append(payload)

        event_bus.subscribe("invoice.sent", on_sent)

        issue = datetime.now(timezone.utc) - timedelta(days=31)
        draft = await create_draft(invoicing, issue_date=issue)
        await invoicing.add_line("tenant_a", consultation(draft.id))

        sent = await invoicing.send("tenant_a", draft.id)
        assert sent.value.status == "SENT"
        assert len(received) == 1
        assert received[0]["id"] == draft.id
        assert received[0]["status"] == "SENT"
        assert received[0]["lines"][0]["description"] == "Consultation générale"

        # Sent invoices are frozen
        locked = await invoicing.add_line("tenant_a", dressing(draft.id))
        assert locked.is_err()
        assert locked.error.code == "INVALID_INVOICE_STATE"

        resend = await invoicing.send("tenant_a", draft.id)
        assert resend.error.message == "Only invoices in DRAFT status can be sent"

        first_sweep = await invoicing.remind_overdue("tenant_a")
        assert [invoice.id for invoice in first_sweep.value] == [draft.id]
        assert first_sweep.value[0].status == "OVERDUE"

        second_sweep = await invoicing.remind_overdue("tenant_a")
        assert second_sweep.value == []

        paid = await invoicing.mark_paid("tenant_a", draft.id)
        assert paid.value.status == "PAID"

        third_sweep = await invoicing.remind_overdue("tenant_a")
        assert third_sweep.value == []
        assert (await invoicing.find_one("tenant_a", draft.id)).value.status == "PAID"
        assert (await invoicing.find_one("tenant_a", draft.id)).value.total == Decimal("264")

    @pytest.mark.asyncio
    async def test_sweep_ignores_drafts_and_future_due_dates(self, invoicing):
        overdue_draft = await create_draft(
            invoicing, issue_date=datetime.now(timezone.utc) - timedelta(days=60)
        )
        not_due = await create_draft(invoicing)
        await invoicing.add_line("tenant_a", consultation(not_due.id))
        await invoicing.send("tenant_a", not_due.id)

        result = await invoicing.remind_overdue("tenant_a")

        assert result.value == []
        assert (await invoicing.find_one("tenant_a", overdue_draft.id)).value.status == "DRAFT"
        assert (await invoicing.find_one("tenant_a", not_due.id)).value.status == "SENT"

    @pytest.mark.asyncio
    async def test_mark_paid_from_draft_is_accepted(self, invoicing):
        draft = await create_draft(invoicing)

        result = await invoicing.mark_paid("tenant_a", draft.id)

        assert result.value.status == "PAID"


class TestInvoiceRecords:

    @pytest.mark.asyncio
    async def test_generated_numbers_are_unique(self, invoicing):
        numbers = set()
        for _ in range(25):
            numbers.add((await create_draft(invoicing)).number)
        assert len(numbers) == 25

    @pytest.mark.asyncio
    async def test_defaults(self, invoicing):
        draft = await create_draft(invoicing)

        assert draft.status == "DRAFT"
        assert draft.due_at - draft.issue_date == timedelta(days=30)
        assert draft.pdf_path is None
        assert draft.qr_path is None

    @pytest.mark.asyncio
    async def test_issue_date_with_offset_round_trips_as_utc(self, invoicing):
        """
        Given: A caller supplied issue date with a +02:00 offset
        When: The draft is created and read back from the database
        Then: Both dates come back as aware UTC values
        """
        issue = datetime(2024, 3, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        draft = await create_draft(invoicing, issue_date=issue)

        invoice = (await invoicing.find_one("tenant_a", draft.id)).value

        assert invoice.issue_date == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
        assert invoice.issue_date.utcoffset() == timedelta(0)
        assert invoice.due_at == datetime(2024, 3, 31, 8, 0, tzinfo=timezone.utc)
        assert invoice.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_reads_attach_patient_lines_and_payments(self, invoicing, db_session):
        draft = await create_draft(invoicing)
        await invoicing.add_line("tenant_a", consultation(draft.id))
        db_session.add(
            Payment(invoice_id=draft.id, amount=Decimal("100"), method=PaymentMethod.CARD)
        )
        await db_session.commit()

        invoice = (await invoicing.find_one("tenant_a", draft.id)).value

        assert invoice.patient.first_name == "Awa"
        assert invoice.patient.last_name == "Diop"
        assert [line.amount for line in invoice.lines] == [Decimal("264")]
        assert invoice.payments[0].method == "CARD"
        assert invoice.payments[0].amount == Decimal("100")

    @pytest.mark.asyncio
    async def test_list_filters(self, invoicing):
        first = await create_draft(invoicing, issue_date=datetime(2024, 1, 1))
        second = await create_draft(invoicing, issue_date=datetime(2024, 2, 1))
        other_patient = await create_draft(invoicing, patient_id="patient-x")
        await invoicing.add_line("tenant_a", consultation(second.id))
        await invoicing.send("tenant_a", second.id)

        everything = (await invoicing.find_all("tenant_a")).value
        by_patient = (await invoicing.find_all("tenant_a", patient_id="patient-a")).value
        sent = (await invoicing.find_all("tenant_a", status=InvoiceStatus.SENT)).value

        assert {invoice.id for invoice in everything} == {first.id, second.id, other_patient.id}
        assert [invoice.id for invoice in by_patient][-2:] == [second.id, first.id]
        assert [invoice.id for invoice in sent] == [second.id]

    @pytest.mark.asyncio
    async def test_update_peripheral_fields(self, invoicing):
        draft = await create_draft(invoicing)
        due = datetime(2030, 1, 31, tzinfo=timezone.utc)

        result = await invoicing.update(
            "tenant_a", draft.id, UpdateInvoiceCommandDTO(notes="Relance", due_at=due)
        )

        assert result.value.notes == "Relance"
        assert result.value.due_at == due
        assert result.value.number == draft.number
        assert result.value.status == "DRAFT"

    @pytest.mark.asyncio
    async def test_delete_removes_invoice_and_lines(self, invoicing, db_session):
        draft = await create_draft(invoicing)
        await invoicing.add_line("tenant_a", consultation(draft.id))

        deleted = await invoicing.delete("tenant_a", draft.id)

        assert deleted.value is True
        assert (await invoicing.find_one("tenant_a", draft.id)).error.code == "INVOICE_NOT_FOUND"
        assert await SqlAlchemyInvoiceLineRepository(db_session).get_by_invoice_id(draft.id) == []

        again = await invoicing.delete("tenant_a", draft.id)
        assert again.error.code == "INVOICE_NOT_FOUND"
