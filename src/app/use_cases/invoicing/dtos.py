"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating a draft invoice

    Used as input to CreateDraftInvoice use case.
    """

    patient_id: str = Field(
        ...,
        description="Billed patient (not validated by the invoicing core)"
    )

    number: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Invoice number, generated when omitted"
    )

    due_at: Optional[datetime] = Field(
        default=None,
        description="Due date, defaults to issue date + 30 days"
    )

    encounter_id: Optional[str] = Field(
        default=None,
        description="Originating encounter"
    )

    issue_date: Optional[datetime] = Field(
        default=None,
        description="Issue date, defaults to now"
    )

    billing_address: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Structured billing address"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free text printed on the invoice"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "patient_id": "7d0c4a9e-3f55-4a1e-9a53-3c1b0b5e2f11",
                "number": "INV-2024-0042",
                "due_at": "2024-03-01T00:00:00",
                "notes": "Consultation du 01/02/2024",
            }
        }


class AddInvoiceLineCommandDTO(BaseModel):
    """
    Command DTO for appending a line to a draft invoice

    Used as input to AddInvoiceLine use case.
    """

    invoice_id: str = Field(
        ...,
        description="Invoice receiving the line"
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Line description"
    )

    quantity: Decimal = Field(
        ...,
        gt=0,
        description="Quantity (must be > 0)"
    )

    unit_price: Decimal = Field(
        ...,
        ge=0,
        description="Unit price (must be >= 0)"
    )

    third_party_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=100,
        description="Share covered by a third-party payer, percent 0-100"
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Tax rate on the patient share, percent"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "2b0b6c1e-1f43-4c55-b0d2-8f1f2d9f6a10",
                "description": "Consultation générale",
                "quantity": "3",
                "unit_price": "100",
                "third_party_rate": "20",
                "tax_rate": "10",
            }
        }


class UpdateInvoiceCommandDTO(BaseModel):
    """Peripheral fields editable on an existing invoice"""

    number: Optional[str] = Field(default=None, max_length=64)
    due_at: Optional[datetime] = None
    issue_date: Optional[datetime] = None
    notes: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    patient_id: Optional[str] = None
    encounter_id: Optional[str] = None


class InvoiceLineDTO(BaseModel):
    """Invoice line with its computed amount"""

    id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    third_party_rate: Decimal
    tax_rate: Decimal
    amount: Decimal = Field(..., description="Payable amount of the line")


class PatientSummaryDTO(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PaymentDTO(BaseModel):
    id: str
    amount: Decimal
    method: str
    paid_at: datetime
    reference: Optional[str] = None


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice operations

    Invoice with patient, lines and payments attached.
    """

    id: str
    tenant_id: str
    number: str
    status: str
    issue_date: datetime
    due_at: datetime
    total: Decimal
    notes: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    patient_id: Optional[str] = None
    encounter_id: Optional[str] = None
    pdf_path: Optional[str] = None
    qr_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    patient: Optional[PatientSummaryDTO] = None
    lines: List[InvoiceLineDTO] = Field(default_factory=list)
    payments: List[PaymentDTO] = Field(default_factory=list)


class PdfArtifactDTO(BaseModel):
    """Paths of the artifacts produced by a PDF generation"""

    invoice_id: str
    pdf_path: str
    qr_path: str
    generated_at: datetime


class InvoicePdfDTO(BaseModel):
    """PDF content returned by a download"""

    invoice_id: str
    number: str
    content: bytes

    @property
    def filename(self) -> str:
        return f"facture-{self.number}.pdf"


class QrAuthenticationPayload(BaseModel):
    """
    Content encoded in the invoice QR code

    Snapshot of the invoice identity and amount at generation time. It is
    not signed.
    """

    model_config = ConfigDict(populate_by_name=True)

    invoice_id: str = Field(..., alias="invoiceId")
    invoice_number: str = Field(..., alias="invoiceNumber")
    patient_id: Optional[str] = Field(default=None, alias="patientId")
    total: Decimal
    issue_date: datetime = Field(..., alias="issueDate")
    timestamp: datetime

    @field_serializer("total")
    def serialize_total(self, total: Decimal) -> Union[int, float]:
        # Encoded as a JSON number for QR readers
        if total == total.to_integral_value():
            return int(total)
        return float(total)


class OverdueSweepResultDTO(BaseModel):
    """
    Result of an overdue reminder run over all tenants

    Returned by the OverdueReminderWorker.
    """

    tenants_checked: int
    invoices_marked_overdue: int
    per_tenant: Dict[str, int] = Field(default_factory=dict)
    failed_tenants: List[str] = Field(default_factory=list)
    sweep_time: datetime
    execution_time_ms: int
