"""SQLAlchemy Invoice Line Repository Implementation

Implements invoice line persistence using SQLAlchemy async session.
"""

from typing import Dict, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_line_repository import InvoiceLineRepository
from src.domain.invoice_line import InvoiceLine


class SqlAlchemyInvoiceLineRepository(InvoiceLineRepository):
    """
    SQLAlchemy implementation of InvoiceLineRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceLine]:
        statement = (
            select(InvoiceLine)
            .where(InvoiceLine.invoice_id == invoice_id)
            .order_by(InvoiceLine.created_at, InvoiceLine.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_by_invoice_ids(self, invoice_ids: List[str]) -> Dict[str, List[InvoiceLine]]:
        if not invoice_ids:
            return {}
        statement = (
            select(InvoiceLine)
            .where(InvoiceLine.invoice_id.in_(invoice_ids))
            .order_by(InvoiceLine.created_at, InvoiceLine.id)
        )
        result = await self.session.execute(statement)
        lines_by_invoice: Dict[str, List[InvoiceLine]] = {}
        for line in result.scalars().all():
            lines_by_invoice.setdefault(line.invoice_id, []).append(line)
        return lines_by_invoice

    async def create(self, invoice_line: InvoiceLine) -> InvoiceLine:
        self.session.add(invoice_line)
        await self.session.flush()
        await self.session.refresh(invoice_line)
        return invoice_line
