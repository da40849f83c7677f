"""Builds invoice responses with their related records attached"""

from typing import Dict, List, Optional
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.app.repositories.patient_repository import PatientRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import Invoice
from src.domain.invoice_line import InvoiceLine
from src.domain.patient import Patient
from src.domain.payment import Payment
from .dtos import InvoiceLineDTO, InvoiceResponseDTO, PatientSummaryDTO, PaymentDTO


def to_line_dto(line: InvoiceLine) -> InvoiceLineDTO:
    return InvoiceLineDTO(
        id=line.id,
        description=line.description,
        quantity=line.quantity,
        unit_price=line.unit_price,
        third_party_rate=line.third_party_rate,
        tax_rate=line.tax_rate,
        amount=line.amounts().amount,
    )


def to_invoice_dto(
    invoice: Invoice,
    lines: Optional[List[InvoiceLine]] = None,
    patient: Optional[Patient] = None,
    payments: Optional[List[Payment]] = None,
) -> InvoiceResponseDTO:
    return InvoiceResponseDTO(
        id=invoice.id,
        tenant_id=invoice.tenant_id,
        number=invoice.number,
        status=invoice.status.value,
        issue_date=invoice.issue_date,
        due_at=invoice.due_at,
        total=invoice.total,
        notes=invoice.notes,
        billing_address=invoice.billing_address,
        patient_id=invoice.patient_id,
        encounter_id=invoice.encounter_id,
        pdf_path=invoice.pdf_path,
        qr_path=invoice.qr_path,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        patient=(
            PatientSummaryDTO(
                id=patient.id,
                first_name=patient.first_name,
                last_name=patient.last_name,
            )
            if patient
            else None
        ),
        lines=[to_line_dto(line) for line in lines or []],
        payments=[
            PaymentDTO(
                id=payment.id,
                amount=payment.amount,
                method=payment.method.value,
                paid_at=payment.paid_at,
                reference=payment.reference,
            )
            for payment in payments or []
        ],
    )


class InvoiceReader:
    """
    Attaches patient, lines and payments to invoices

    Loads related records in one query per relation for the whole batch.
    """

    def __init__(
        self,
        invoice_line_repo: InvoiceLineRepository,
        patient_repo: PatientRepository,
        payment_repo: PaymentRepository,
    ):
        self.invoice_line_repo = invoice_line_repo
        self.patient_repo = patient_repo
        self.payment_repo = payment_repo

    async def assemble(self, invoice: Invoice) -> InvoiceResponseDTO:
        return (await self.assemble_many([invoice]))[0]

    async def assemble_many(self, invoices: List[Invoice]) -> List[InvoiceResponseDTO]:
        if not invoices:
            return []

        tenant_id = invoices[0].tenant_id
        invoice_ids = [invoice.id for invoice in invoices]
        patient_ids = sorted({invoice.patient_id for invoice in invoices if invoice.patient_id})

        lines_by_invoice = await self.invoice_line_repo.get_by_invoice_ids(invoice_ids)
        payments_by_invoice = await self.payment_repo.get_by_invoice_ids(invoice_ids)
        patients: Dict[str, Patient] = (
            await self.patient_repo.get_by_ids(tenant_id, patient_ids) if patient_ids else {}
        )

        return [
            to_invoice_dto(
                invoice,
                lines=lines_by_invoice.get(invoice.id, []),
                patient=patients.get(invoice.patient_id) if invoice.patient_id else None,
                payments=payments_by_invoice.get(invoice.id, []),
            )
            for invoice in invoices
        ]
