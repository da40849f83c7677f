"""Request schemas for Invoice API

Pydantic models for validating incoming HTTP requests. Fields are accepted
in camelCase (as sent by the web client) or snake_case.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RequestSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateInvoiceRequestSchema(_RequestSchema):
    """
    Request schema for creating a draft invoice

    Used for POST /invoices endpoint.
    """

    patient_id: str = Field(..., min_length=1, description="Billed patient")
    number: Optional[str] = Field(default=None, max_length=64)
    due_at: Optional[datetime] = None
    encounter_id: Optional[str] = None
    issue_date: Optional[datetime] = None
    billing_address: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "patientId": "7d0c4a9e-3f55-4a1e-9a53-3c1b0b5e2f11",
                "dueAt": "2024-03-01T00:00:00",
                "notes": "Consultation du 01/02/2024",
            }
        }


class AddInvoiceLineRequestSchema(_RequestSchema):
    """
    Request schema for adding a line to a draft invoice

    Used for POST /invoices/line endpoint. The web client's short names
    (qty, tax) are accepted too.
    """

    invoice_id: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=255)
    quantity: Decimal = Field(
        ..., gt=0, validation_alias=AliasChoices("quantity", "qty")
    )
    unit_price: Decimal = Field(..., ge=0)
    third_party_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    tax_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("taxRate", "tax_rate", "tax"),
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoiceId": "2b0b6c1e-1f43-4c55-b0d2-8f1f2d9f6a10",
                "description": "Consultation générale",
                "quantity": "3",
                "unitPrice": "100",
                "thirdPartyRate": "20",
                "taxRate": "10",
            }
        }


class InvoiceStatusRequestSchema(_RequestSchema):
    """
    Request schema for status transitions

    Used for POST /invoices/send and POST /invoices/mark-paid endpoints.
    The optional status is accepted for client compatibility and ignored.
    """

    invoice_id: str = Field(..., min_length=1)
    status: Optional[str] = None


class UpdateInvoiceRequestSchema(_RequestSchema):
    """Request schema for PATCH /invoices/{invoice_id}"""

    number: Optional[str] = Field(default=None, max_length=64)
    due_at: Optional[datetime] = None
    issue_date: Optional[datetime] = None
    notes: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    patient_id: Optional[str] = None
    encounter_id: Optional[str] = None
