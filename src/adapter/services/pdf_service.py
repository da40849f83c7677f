"""ReportLab PDF Generation Service Implementation

Renders the single-page invoice document with ReportLab's canvas API.
Positions are expressed from the top of the page, like a layout mock-up,
and converted to PDF coordinates when drawing.
"""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from src.app.services.pdf_service import PdfRenderingError, PdfService
from src.domain.base import utc_now
from src.domain.invoice import Invoice
from src.domain.invoice_line import InvoiceLine
from src.domain.patient import Patient

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 60
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

# Room kept below the line table for totals, notes and footer blocks.
FOOTER_RESERVE = 140
MAX_ROW_HEIGHT = 30
ROW_MARGIN = 5
ROW_SPACING = 2

PRIMARY = colors.HexColor("#2563eb")
SECONDARY = colors.HexColor("#64748b")
ACCENT = colors.HexColor("#059669")
LIGHT_GRAY = colors.HexColor("#f1f5f9")
DARK_GRAY = colors.HexColor("#334155")


def compute_row_height(available_height: float, line_count: int) -> int:
    """
    Height of one line-table row so that all rows fit on the page

    row = min(30, floor(available / count) - 5), never below 1 point.
    """
    if line_count <= 0:
        return MAX_ROW_HEIGHT
    return max(1, min(MAX_ROW_HEIGHT, math.floor(available_height / line_count) - ROW_MARGIN))


def line_table_layout(table_top: float, line_count: int):
    """
    Row height and bottom edge (top-based) of the line table

    The table starts at table_top and must end above the footer reserve.
    """
    row_height = compute_row_height(PAGE_HEIGHT - table_top - FOOTER_RESERVE, line_count)
    return row_height, table_top + line_count * (row_height + ROW_SPACING)


def format_number(value) -> str:
    """French grouping: '1 234,5' (at most two decimals, no trailing zeros)"""
    quantized = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    integer_part, fraction = f"{quantized:,.2f}".split(".")
    integer_part = integer_part.replace(",", " ")
    fraction = fraction.rstrip("0")
    return f"{integer_part},{fraction}" if fraction else integer_part


def format_amount(value, suffix: str = "FCFA") -> str:
    return f"{format_number(value)} {suffix}"


def format_quantity(value) -> str:
    return format(Decimal(value).normalize(), "f")


def format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def format_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S")


def rate_annotation(line: InvoiceLine) -> str:
    parts = []
    if line.third_party_rate and Decimal(line.third_party_rate) > 0:
        parts.append(f"Tiers payant: {format_quantity(line.third_party_rate)}%")
    if line.tax_rate and Decimal(line.tax_rate) > 0:
        parts.append(f"Taxe: {format_quantity(line.tax_rate)}%")
    return " | ".join(parts)


class _Page:
    """Canvas wrapper taking top-based coordinates"""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf

    def rect(self, x, top, width, height, fill=None, stroke=None, line_width=1):
        if fill is not None:
            self.pdf.setFillColor(fill)
        if stroke is not None:
            self.pdf.setStrokeColor(stroke)
            self.pdf.setLineWidth(line_width)
        self.pdf.rect(
            x,
            PAGE_HEIGHT - top - height,
            width,
            height,
            stroke=1 if stroke is not None else 0,
            fill=1 if fill is not None else 0,
        )

    def text(self, value, x, top, size, font="Helvetica", color=DARK_GRAY, align="left", width=None):
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        baseline = PAGE_HEIGHT - top - size * 0.8
        if align == "center":
            center = x + width / 2 if width else PAGE_WIDTH / 2
            self.pdf.drawCentredString(center, baseline, value)
        elif align == "right":
            self.pdf.drawRightString(x + (width or 0), baseline, value)
        else:
            self.pdf.drawString(x, baseline, value)

    def wrapped_text(self, value, x, top, size, width, max_height, font="Helvetica", color=DARK_GRAY):
        leading = size * 1.15
        max_lines = max(1, int(max_height // leading))
        for index, row in enumerate(simpleSplit(value, font, size, width)[:max_lines]):
            self.text(row, x, top + index * leading, size, font=font, color=color)

    def image(self, data: bytes, x, top, width, height):
        self.pdf.drawImage(
            ImageReader(BytesIO(data)), x, PAGE_HEIGHT - top - height, width=width, height=height
        )


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    Layout, top to bottom: branded header, patient and invoice block, line
    table, totals band, optional notes, QR and legal block, copyright bar.
    """

    def __init__(
        self,
        currency_suffix: str = "FCFA",
        default_clinic_name: str = "Clinique Médicale",
    ):
        self.currency_suffix = currency_suffix
        self.default_clinic_name = default_clinic_name

    def render_invoice(
        self,
        invoice: Invoice,
        invoice_lines: List[InvoiceLine],
        patient: Optional[Patient],
        qr_png: bytes,
        clinic_name: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        try:
            return self._render(
                invoice,
                invoice_lines,
                patient,
                qr_png,
                clinic_name or self.default_clinic_name,
                generated_at or utc_now(),
            )
        except Exception as e:
            raise PdfRenderingError(f"Could not render invoice {invoice.number}: {e}") from e

    def _render(self, invoice, lines, patient, qr_png, clinic_name, generated_at) -> bytes:
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        patient_name = patient.full_name if patient else ""
        pdf.setTitle(f"Facture {invoice.number}")
        pdf.setAuthor(clinic_name)
        pdf.setSubject(f"Facture pour {patient_name}".strip())
        pdf.setCreator("Medical System PDF Generator")
        page = _Page(pdf)

        # Header
        page.rect(0, 0, PAGE_WIDTH, 80, fill=PRIMARY)
        page.text(clinic_name.upper(), MARGIN, 15, 16, font="Helvetica-Bold", color=colors.white, align="center")
        page.text("FACTURE", MARGIN, 35, 14, font="Helvetica-Bold", color=colors.white, align="center")
        page.text(
            f"N° {invoice.number} - Généré le {format_datetime(generated_at)}",
            MARGIN, 55, 9, color=colors.white, align="center",
        )

        # Patient and invoice block
        y = 100
        page.rect(MARGIN, y, CONTENT_WIDTH, 50, stroke=SECONDARY)
        page.rect(MARGIN, y, CONTENT_WIDTH, 15, fill=LIGHT_GRAY)
        page.text("INFORMATIONS PATIENT & FACTURE", 70, y + 5, 10, font="Helvetica-Bold")
        y += 20
        page.text(f"Patient: {patient_name}", 70, y, 9)
        page.text(f"Émission: {format_date(invoice.issue_date)}", 70, y + 12, 9)
        page.text(f"Statut: {invoice.status.value}", 350, y, 9)
        page.text(f"Échéance: {format_date(invoice.due_at)}", 350, y + 12, 9)

        # Line table
        y += 30
        page.rect(MARGIN, y, CONTENT_WIDTH, 20, fill=ACCENT)
        page.text("DÉTAILS DE LA FACTURE", 70, y + 7, 11, font="Helvetica-Bold", color=colors.white)
        y += 25
        page.rect(MARGIN, y, CONTENT_WIDTH, 18, fill=LIGHT_GRAY)
        page.text("DESCRIPTION", 70, y + 5, 8, font="Helvetica-Bold")
        page.text("QTÉ", 300, y + 5, 8, font="Helvetica-Bold", align="center", width=40)
        page.text("P.U.", 350, y + 5, 8, font="Helvetica-Bold", align="right", width=70)
        page.text("MONTANT", 430, y + 5, 8, font="Helvetica-Bold", align="right", width=110)
        y += 20

        row_height, _ = line_table_layout(y, len(lines))
        for line in lines:
            page.rect(MARGIN, y, CONTENT_WIDTH, row_height, stroke=SECONDARY, line_width=0.5)
            page.wrapped_text(line.description, 70, y + 3, 9, width=220, max_height=row_height - 6)
            page.text(format_quantity(line.quantity), 300, y + 3, 9, align="center", width=40)
            page.text(format_number(line.unit_price), 350, y + 3, 9, align="right", width=70)
            page.text(
                format_amount(line.amounts().amount, self.currency_suffix),
                430, y + 3, 9, align="right", width=110,
            )
            annotation = rate_annotation(line)
            if annotation:
                page.text(annotation, 70, y + 15, 7, color=SECONDARY)
            y += row_height + ROW_SPACING

        # Totals
        y += 10
        page.rect(MARGIN, y, CONTENT_WIDTH, 30, fill=LIGHT_GRAY)
        page.text("TOTAL À PAYER:", 70, y + 10, 11, font="Helvetica-Bold")
        page.text(
            format_amount(invoice.total, self.currency_suffix),
            PAGE_WIDTH - 180, y + 8, 14, font="Helvetica-Bold", color=PRIMARY, align="right", width=110,
        )

        # Notes
        y += 35
        if invoice.notes:
            page.text("Notes:", MARGIN, y, 8, font="Helvetica-Bold")
            y += 12
            page.wrapped_text(invoice.notes, MARGIN, y, 7, width=CONTENT_WIDTH, max_height=30, color=SECONDARY)
            y += 35

        # QR and legal block
        y += 5
        page.rect(MARGIN, y, CONTENT_WIDTH, 60, stroke=SECONDARY, line_width=0.5)
        page.image(qr_png, 70, y + 10, 40, 40)
        page.text("Authentification QR", 120, y + 10, 8, font="Helvetica-Bold")
        page.text("Code QR pour vérification", 120, y + 22, 7, color=SECONDARY)
        page.text(f"ID: {invoice.id[:8]}...", 120, y + 32, 7, color=SECONDARY)
        page.text(clinic_name, 300, y + 10, 8)
        page.text("Document confidentiel", 300, y + 22, 7, color=SECONDARY)
        page.text(format_date(generated_at), 300, y + 32, 7, color=SECONDARY)

        # Copyright bar
        y += 70
        page.rect(0, y, PAGE_WIDTH, 20, fill=LIGHT_GRAY)
        page.text(
            f"© {generated_at.year} {clinic_name} - En cas de questions, veuillez contacter votre clinique",
            MARGIN, y + 8, 7, color=SECONDARY,
        )

        pdf.showPage()
        pdf.save()
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes
