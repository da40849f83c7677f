"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.base import as_utc, utc_now
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_line import InvoiceLine
from src.domain.payment import Payment


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Every statement filters on tenant_id.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, tenant_id: str, invoice_id: str) -> Optional[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .where(Invoice.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_by_tenant(
        self,
        tenant_id: str,
        patient_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        statement = select(Invoice).where(Invoice.tenant_id == tenant_id)

        if patient_id:
            statement = statement.where(Invoice.patient_id == patient_id)
        if status:
            statement = statement.where(Invoice.status == status)

        statement = statement.order_by(Invoice.issue_date.desc())

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update_fields(
        self, tenant_id: str, invoice_id: str, values: Dict[str, Any]
    ) -> Optional[Invoice]:
        values = dict(values)
        values.setdefault("updated_at", utc_now())
        statement = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .where(Invoice.tenant_id == tenant_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(statement)
        await self.session.flush()
        return await self.get_by_id(tenant_id, invoice_id)

    async def mark_overdue(self, tenant_id: str, now: datetime) -> List[Invoice]:
        now = as_utc(now)
        statement = (
            select(Invoice.id)
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.status == InvoiceStatus.SENT)
            .where(Invoice.due_at < now)
        )
        result = await self.session.execute(statement)
        invoice_ids = list(result.scalars().all())
        if not invoice_ids:
            return []

        await self.session.execute(
            update(Invoice)
            .where(Invoice.id.in_(invoice_ids))
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.status == InvoiceStatus.SENT)
            .values(status=InvoiceStatus.OVERDUE, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()

        reloaded = await self.session.execute(
            select(Invoice)
            .where(Invoice.id.in_(invoice_ids))
            .where(Invoice.tenant_id == tenant_id)
            .where(Invoice.status == InvoiceStatus.OVERDUE)
            .order_by(Invoice.due_at)
            .execution_options(populate_existing=True)
        )
        return list(reloaded.scalars().all())

    async def list_tenant_ids_with_overdue(self, now: datetime) -> List[str]:
        statement = (
            select(Invoice.tenant_id)
            .where(Invoice.status == InvoiceStatus.SENT)
            .where(Invoice.due_at < as_utc(now))
            .distinct()
            .order_by(Invoice.tenant_id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def delete(self, tenant_id: str, invoice_id: str) -> bool:
        invoice = await self.get_by_id(tenant_id, invoice_id)
        if not invoice:
            return False

        # SQLite does not enforce ON DELETE CASCADE without a pragma.
        await self.session.execute(delete(InvoiceLine).where(InvoiceLine.invoice_id == invoice.id))
        await self.session.execute(delete(Payment).where(Payment.invoice_id == invoice.id))
        await self.session.delete(invoice)
        await self.session.flush()
        return True
