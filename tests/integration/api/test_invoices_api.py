"""Integration tests for Invoice API endpoints"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from httpx import AsyncClient

TENANT_A = {"X-Tenant-Id": "tenant_a"}
TENANT_B = {"X-Tenant-Id": "tenant_b"}


async def create_invoice(client: AsyncClient, **payload):
    body = {"patientId": "patient-a"}
    body.update(payload)
    response = await client.post("/invoices", json=body, headers=TENANT_A)
    assert response.status_code == 201, response.text
    return response.json()


async def add_line(client: AsyncClient, invoice_id: str, **payload):
    body = {
        "invoiceId": invoice_id,
        "description": "Consultation",
        "quantity": 3,
        "unitPrice": 100,
        "thirdPartyRate": 20,
        "taxRate": 10,
    }
    body.update(payload)
    return await client.post("/invoices/line", json=body, headers=TENANT_A)


class TestInvoicesAPIIntegration:
    """Integration test suite for Invoice API endpoints"""

    @pytest.mark.asyncio
    async def test_missing_tenant_header_is_rejected(self, client: AsyncClient):
        response = await client.get("/invoices")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_draft(self, client: AsyncClient):
        data = await create_invoice(client, notes="Consultation du matin")

        assert data["status"] == "DRAFT"
        assert data["tenant_id"] == "tenant_a"
        assert data["patient_id"] == "patient-a"
        assert Decimal(data["total"]) == Decimal("0")
        assert data["number"].startswith("INV-")
        assert data["notes"] == "Consultation du matin"

    @pytest.mark.asyncio
    async def test_create_draft_with_offset_issue_date(self, client: AsyncClient):
        data = await create_invoice(client, issueDate="2024-03-01T10:00:00+02:00")

        issue_date = datetime.fromisoformat(data["issue_date"].replace("Z", "+00:00"))
        due_at = datetime.fromisoformat(data["due_at"].replace("Z", "+00:00"))
        assert issue_date == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
        assert due_at == datetime(2024, 3, 31, 8, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_create_validation_error(self, client: AsyncClient):
        response = await client.post("/invoices", json={}, headers=TENANT_A)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_add_lines_and_total(self, client: AsyncClient):
        invoice = await create_invoice(client)

        first = await add_line(client, invoice["id"])
        second = await add_line(
            client, invoice["id"], description="Pansement", quantity=1, unitPrice=50,
            thirdPartyRate=0, taxRate=0,
        )

        assert first.status_code == 200
        assert Decimal(first.json()["lines"][0]["amount"]) == Decimal("264")
        assert second.status_code == 200
        assert Decimal(second.json()["total"]) == Decimal("314")

    @pytest.mark.asyncio
    async def test_add_line_short_field_names(self, client: AsyncClient):
        invoice = await create_invoice(client)

        response = await client.post(
            "/invoices/line",
            json={
                "invoiceId": invoice["id"],
                "description": "Injection",
                "qty": 2,
                "unitPrice": 15,
                "tax": 0,
            },
            headers=TENANT_A,
        )

        assert response.status_code == 200, response.text
        line = response.json()["lines"][0]
        assert Decimal(line["quantity"]) == Decimal("2")

    @pytest.mark.asyncio
    async def test_add_line_rejects_invalid_quantity(self, client: AsyncClient):
        invoice = await create_invoice(client)

        response = await add_line(client, invoice["id"], quantity=0)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_send_without_lines_returns_400(self, client: AsyncClient):
        invoice = await create_invoice(client)

        response = await client.post(f"/invoices/{invoice['id']}/send", headers=TENANT_A)

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "INVALID_INVOICE_STATE"
        assert data["error"]["message"] == "Cannot send an invoice without lines"

    @pytest.mark.asyncio
    async def test_status_flow(self, client: AsyncClient):
        issue = (datetime.now(timezone.utc) - timedelta(days=40)).isoformat()
        invoice = await create_invoice(client, issueDate=issue)
        await add_line(client, invoice["id"])

        sent = await client.post(
            "/invoices/send", json={"invoiceId": invoice["id"], "status": "SENT"}, headers=TENANT_A
        )
        assert sent.status_code == 200
        assert sent.json()["status"] == "SENT"

        frozen = await add_line(client, invoice["id"])
        assert frozen.status_code == 400
        assert frozen.json()["error"]["message"] == (
            "Cannot add lines to an invoice that is not in DRAFT status"
        )

        reminded = await client.post("/invoices/remind-overdue", headers=TENANT_A)
        assert reminded.status_code == 200
        assert [i["id"] for i in reminded.json()] == [invoice["id"]]
        assert reminded.json()[0]["status"] == "OVERDUE"

        again = await client.post("/invoices/remind-overdue", headers=TENANT_A)
        assert again.json() == []

        paid = await client.post(
            "/invoices/mark-paid", json={"invoice_id": invoice["id"]}, headers=TENANT_A
        )
        assert paid.status_code == 200
        assert paid.json()["status"] == "PAID"

    @pytest.mark.asyncio
    async def test_list_and_filters(self, client: AsyncClient):
        first = await create_invoice(client)
        second = await create_invoice(client, patientId="patient-z")
        await add_line(client, second["id"])
        await client.post(f"/invoices/{second['id']}/send", headers=TENANT_A)

        everything = await client.get("/invoices", headers=TENANT_A)
        by_patient = await client.get("/invoices", params={"patientId": "patient-a"}, headers=TENANT_A)
        sent = await client.get("/invoices", params={"status": "SENT"}, headers=TENANT_A)

        assert {i["id"] for i in everything.json()} == {first["id"], second["id"]}
        assert [i["id"] for i in by_patient.json()] == [first["id"]]
        assert [i["id"] for i in sent.json()] == [second["id"]]

    @pytest.mark.asyncio
    async def test_get_update_delete(self, client: AsyncClient):
        invoice = await create_invoice(client)

        fetched = await client.get(f"/invoices/{invoice['id']}", headers=TENANT_A)
        assert fetched.status_code == 200
        assert fetched.json()["patient"]["last_name"] == "Diop"

        patched = await client.patch(
            f"/invoices/{invoice['id']}", json={"notes": "Modifiée"}, headers=TENANT_A
        )
        assert patched.status_code == 200
        assert patched.json()["notes"] == "Modifiée"
        assert patched.json()["number"] == invoice["number"]

        deleted = await client.delete(f"/invoices/{invoice['id']}", headers=TENANT_A)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Invoice deleted successfully"}

        missing = await client.get(f"/invoices/{invoice['id']}", headers=TENANT_A)
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "INVOICE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_other_tenant_gets_404(self, client: AsyncClient):
        invoice = await create_invoice(client)

        response = await client.get(f"/invoices/{invoice['id']}", headers=TENANT_B)
        download = await client.get(f"/invoices/{invoice['id']}/download/pdf", headers=TENANT_B)

        assert response.status_code == 404
        assert download.status_code == 404

    @pytest.mark.asyncio
    async def test_download_pdf(self, client: AsyncClient, storage):
        invoice = await create_invoice(client)
        await add_line(client, invoice["id"])

        response = await client.get(f"/invoices/{invoice['id']}/download/pdf", headers=TENANT_A)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            f'attachment; filename="facture-{invoice["number"]}.pdf"'
        )
        assert response.content.startswith(b"%PDF")
        assert storage.paths("medical-invoices") == [
            f"tenant_a/invoices/pdf/{invoice['id']}.pdf",
            f"tenant_a/invoices/qr/{invoice['id']}.png",
        ]

    @pytest.mark.asyncio
    async def test_download_pdf_with_non_ascii_number(self, client: AsyncClient):
        invoice = await create_invoice(client, number="ФАКТ-1")
        await add_line(client, invoice["id"])

        response = await client.get(f"/invoices/{invoice['id']}/download/pdf", headers=TENANT_A)

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        assert response.headers["content-disposition"] == (
            'attachment; filename="facture-____-1.pdf"; '
            "filename*=UTF-8''facture-%D0%A4%D0%90%D0%9A%D0%A2-1.pdf"
        )

    @pytest.mark.asyncio
    async def test_download_pdf_with_quote_in_number(self, client: AsyncClient):
        invoice = await create_invoice(client, number='INV "A"')
        await add_line(client, invoice["id"])

        response = await client.get(f"/invoices/{invoice['id']}/download/pdf", headers=TENANT_A)

        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            'attachment; filename="facture-INV__A_.pdf"; '
            "filename*=UTF-8''facture-INV%20%22A%22.pdf"
        )

    @pytest.mark.asyncio
    async def test_regenerate_pdf(self, client: AsyncClient):
        invoice = await create_invoice(client)

        response = await client.post(f"/invoices/{invoice['id']}/regenerate-pdf", headers=TENANT_A)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "PDF generated successfully"
        assert data["pdf_path"] == f"tenant_a/invoices/pdf/{invoice['id']}.pdf"
        assert data["qr_path"] == f"tenant_a/invoices/qr/{invoice['id']}.png"

    @pytest.mark.asyncio
    async def test_storage_outage_returns_502(self, client: AsyncClient, storage):
        invoice = await create_invoice(client)
        storage.failing_fragments.add("/invoices/")

        response = await client.get(f"/invoices/{invoice['id']}/download/pdf", headers=TENANT_A)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "STORAGE_FAILURE"
