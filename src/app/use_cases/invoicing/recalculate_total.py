"""Invoice total recalculation

The only place where Invoice.total is written.
"""

from typing import Optional
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.domain.invoice import Invoice, compute_invoice_total


async def recalculate_total(
    invoice_repo: InvoiceRepository,
    invoice_line_repo: InvoiceLineRepository,
    tenant_id: str,
    invoice_id: str,
) -> Optional[Invoice]:
    """
    Recompute and persist the total of an invoice from all of its lines

    Args:
        invoice_repo: Invoice repository
        invoice_line_repo: Invoice line repository
        tenant_id: Tenant identifier
        invoice_id: Invoice ID

    Returns:
        Updated invoice, None if it does not exist for this tenant
    """
    lines = await invoice_line_repo.get_by_invoice_id(invoice_id)
    total = compute_invoice_total(lines)
    return await invoice_repo.update_fields(tenant_id, invoice_id, {"total": total})
