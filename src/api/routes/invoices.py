"""Invoice API Routes

FastAPI routes for the invoice lifecycle: drafts, lines, status transitions,
overdue reminders and PDF/QR artifacts. Every route is scoped to the tenant
of the caller (X-Tenant-Id).
"""

import re
from typing import List, Optional
from urllib.parse import quote
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from src.api.error import ClientError
from src.api.schemas.invoice_request import (
    AddInvoiceLineRequestSchema,
    CreateInvoiceRequestSchema,
    InvoiceStatusRequestSchema,
    UpdateInvoiceRequestSchema,
)
from src.app.use_cases.invoicing import InvoicingFacade
from src.app.use_cases.invoicing.dtos import (
    AddInvoiceLineCommandDTO,
    CreateInvoiceCommandDTO,
    InvoiceResponseDTO,
    UpdateInvoiceCommandDTO,
)
from src.app.use_cases.invoicing.errors import (
    INVALID_INVOICE_STATE,
    INVOICE_NOT_FOUND,
    RENDERING_FAILURE,
    STORAGE_FAILURE,
)
from src.depends import get_invoicing, get_tenant_id
from src.domain.invoice import InvoiceStatus

router = APIRouter(prefix="/invoices", tags=["Invoices"])

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

ERROR_STATUS_CODES = {
    INVOICE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    INVALID_INVOICE_STATE: status.HTTP_400_BAD_REQUEST,
    STORAGE_FAILURE: status.HTTP_502_BAD_GATEWAY,
    RENDERING_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

NOT_FOUND_RESPONSE = {
    "description": "Invoice not found",
    "content": {
        "application/json": {
            "example": {
                "error": {
                    "code": "INVOICE_NOT_FOUND",
                    "message": "Invoice with ID 123 not found"
                }
            }
        }
    }
}


def _unwrap(result):
    if result.is_err():
        raise ClientError(
            result.error,
            status_code=ERROR_STATUS_CODES.get(result.error.code, status.HTTP_400_BAD_REQUEST),
        )
    return result.value


def content_disposition(filename: str) -> str:
    """
    Attachment header for a PDF download

    Invoice numbers are free text. Names outside printable ASCII, or holding
    quotes, get an ASCII fallback plus an RFC 5987 filename* parameter.
    """
    printable = all(32 <= ord(char) < 127 for char in filename)
    if printable and '"' not in filename and "\\" not in filename:
        return f'attachment; filename="{filename}"'
    fallback = UNSAFE_FILENAME_CHARS.sub("_", filename)
    encoded = quote(filename, safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """
    Create a draft invoice for a patient.

    The number is generated when omitted and the due date defaults to
    issue date + 30 days. The invoice starts with a zero total.
    """
    command = CreateInvoiceCommandDTO(
        patient_id=request.patient_id,
        number=request.number,
        due_at=request.due_at,
        encounter_id=request.encounter_id,
        issue_date=request.issue_date,
        billing_address=request.billing_address,
        notes=request.notes,
    )
    return _unwrap(await invoicing.create_draft(tenant_id, command))


@router.post(
    "/line",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: NOT_FOUND_RESPONSE,
        400: {
            "description": "Invoice is not a draft",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_INVOICE_STATE",
                            "message": "Cannot add lines to an invoice that is not in DRAFT status"
                        }
                    }
                }
            }
        }
    }
)
async def add_invoice_line(
    request: AddInvoiceLineRequestSchema,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """
    Append a line to a draft invoice and recompute its total.

    **Example request:**
    ```json
    {
      "invoiceId": "2b0b6c1e-1f43-4c55-b0d2-8f1f2d9f6a10",
      "description": "Consultation",
      "quantity": 3,
      "unitPrice": 100,
      "thirdPartyRate": 20,
      "taxRate": 10
    }
    ```
    The line amount is 264 (3 x 100, minus 20% third-party share, plus 10% tax).
    """
    command = AddInvoiceLineCommandDTO(
        invoice_id=request.invoice_id,
        description=request.description,
        quantity=request.quantity,
        unit_price=request.unit_price,
        third_party_rate=request.third_party_rate,
        tax_rate=request.tax_rate,
    )
    return _unwrap(await invoicing.add_line(tenant_id, command))


@router.post(
    "/send",
    response_model=InvoiceResponseDTO,
    responses={404: NOT_FOUND_RESPONSE},
)
async def send_invoice_by_body(
    request: InvoiceStatusRequestSchema,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """Send a draft invoice identified in the request body."""
    return _unwrap(await invoicing.send(tenant_id, request.invoice_id))


@router.post(
    "/mark-paid",
    response_model=InvoiceResponseDTO,
    responses={404: NOT_FOUND_RESPONSE},
)
async def mark_invoice_paid(
    request: InvoiceStatusRequestSchema,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """Mark an invoice as paid."""
    return _unwrap(await invoicing.mark_paid(tenant_id, request.invoice_id))


@router.post("/remind-overdue", response_model=List[InvoiceResponseDTO])
async def remind_overdue_invoices(
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """
    Move the tenant's SENT invoices past their due date to OVERDUE.

    Returns only the invoices changed by this call; running it again
    right away returns an empty list.
    """
    return _unwrap(await invoicing.remind_overdue(tenant_id))


@router.get("", response_model=List[InvoiceResponseDTO])
async def list_invoices(
    patient_id: Optional[str] = Query(default=None, alias="patientId"),
    invoice_status: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """List the tenant's invoices, newest first, optionally filtered."""
    return _unwrap(
        await invoicing.find_all(tenant_id, patient_id=patient_id, status=invoice_status)
    )


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponseDTO,
    responses={404: NOT_FOUND_RESPONSE},
)
async def get_invoice(
    invoice_id: str,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    return _unwrap(await invoicing.find_one(tenant_id, invoice_id))


@router.patch(
    "/{invoice_id}",
    response_model=InvoiceResponseDTO,
    responses={404: NOT_FOUND_RESPONSE},
)
async def update_invoice(
    invoice_id: str,
    request: UpdateInvoiceRequestSchema,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """
    Update peripheral invoice fields.

    Status, total and artifact paths cannot be changed here; only the
    fields present in the body are written.
    """
    command = UpdateInvoiceCommandDTO(**request.model_dump(exclude_unset=True))
    return _unwrap(await invoicing.update(tenant_id, invoice_id, command))


@router.delete("/{invoice_id}", responses={404: NOT_FOUND_RESPONSE})
async def delete_invoice(
    invoice_id: str,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    _unwrap(await invoicing.delete(tenant_id, invoice_id))
    return {"message": "Invoice deleted successfully"}


@router.post(
    "/{invoice_id}/send",
    response_model=InvoiceResponseDTO,
    responses={404: NOT_FOUND_RESPONSE},
)
async def send_invoice(
    invoice_id: str,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """Send a draft invoice that has at least one line."""
    return _unwrap(await invoicing.send(tenant_id, invoice_id))


@router.get(
    "/{invoice_id}/download/pdf",
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "PDF document"
        },
        404: NOT_FOUND_RESPONSE,
        502: {"description": "Object storage unavailable"},
    }
)
async def download_invoice_pdf(
    invoice_id: str,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """
    Download the invoice PDF.

    The PDF and QR code are generated first when the invoice has none yet.
    """
    pdf = _unwrap(await invoicing.download_pdf(invoice_id, tenant_id))

    return Response(
        content=pdf.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": content_disposition(pdf.filename)
        }
    )


@router.post(
    "/{invoice_id}/regenerate-pdf",
    responses={404: NOT_FOUND_RESPONSE},
)
async def regenerate_invoice_pdf(
    invoice_id: str,
    tenant_id: str = Depends(get_tenant_id),
    invoicing: InvoicingFacade = Depends(get_invoicing),
):
    """Render the PDF and QR code again from the current invoice data."""
    artifacts = _unwrap(await invoicing.generate_pdf(invoice_id, tenant_id))
    return {
        "message": "PDF generated successfully",
        "pdf_path": artifacts.pdf_path,
        "qr_path": artifacts.qr_path,
        "generated_at": artifacts.generated_at,
    }
