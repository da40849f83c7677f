"""Invoicing use cases"""
from .create_draft_invoice import CreateDraftInvoice
from .add_invoice_line import AddInvoiceLine
from .send_invoice import SendInvoice
from .mark_invoice_paid import MarkInvoicePaid
from .remind_overdue_invoices import RemindOverdueInvoices
from .generate_invoice_pdf import GenerateInvoicePdf
from .download_invoice_pdf import DownloadInvoicePdf
from .get_invoice import GetInvoice, ListInvoices
from .update_invoice import UpdateInvoice, DeleteInvoice
from .invoicing_facade import InvoicingFacade
from .dtos import (
    CreateInvoiceCommandDTO,
    AddInvoiceLineCommandDTO,
    UpdateInvoiceCommandDTO,
    InvoiceLineDTO,
    PatientSummaryDTO,
    PaymentDTO,
    InvoiceResponseDTO,
    PdfArtifactDTO,
    InvoicePdfDTO,
    QrAuthenticationPayload,
    OverdueSweepResultDTO,
)

__all__ = [
    "CreateDraftInvoice",
    "AddInvoiceLine",
    "SendInvoice",
    "MarkInvoicePaid",
    "RemindOverdueInvoices",
    "GenerateInvoicePdf",
    "DownloadInvoicePdf",
    "GetInvoice",
    "ListInvoices",
    "UpdateInvoice",
    "DeleteInvoice",
    "InvoicingFacade",
    "CreateInvoiceCommandDTO",
    "AddInvoiceLineCommandDTO",
    "UpdateInvoiceCommandDTO",
    "InvoiceLineDTO",
    "PatientSummaryDTO",
    "PaymentDTO",
    "InvoiceResponseDTO",
    "PdfArtifactDTO",
    "InvoicePdfDTO",
    "QrAuthenticationPayload",
    "OverdueSweepResultDTO",
]
