"""PDF Generation Service Interface

Defines the contract for rendering invoice documents.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from src.domain.invoice import Invoice
from src.domain.invoice_line import InvoiceLine
from src.domain.patient import Patient


class PdfRenderingError(Exception):
    """Raised when a document cannot be rendered"""


class PdfService(ABC):
    """
    Service interface for PDF generation

    Renders a single-page invoice document.
    """

    @abstractmethod
    def render_invoice(
        self,
        invoice: Invoice,
        invoice_lines: List[InvoiceLine],
        patient: Optional[Patient],
        qr_png: bytes,
        clinic_name: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        Render an invoice PDF

        Args:
            invoice: Invoice entity with billing details
            invoice_lines: Line items of the invoice
            patient: Billed patient, if known
            qr_png: PNG image of the authentication QR code
            clinic_name: Tenant display name used for branding
            generated_at: Generation timestamp printed on the document

        Returns:
            PDF document as bytes

        Raises:
            PdfRenderingError: rendering failed
        """
        pass
