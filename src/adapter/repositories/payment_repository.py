"""SQLAlchemy Payment Repository Implementation"""

from typing import Dict, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.payment import Payment


class SqlAlchemyPaymentRepository(PaymentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_invoice_ids(self, invoice_ids: List[str]) -> Dict[str, List[Payment]]:
        if not invoice_ids:
            return {}
        statement = (
            select(Payment)
            .where(Payment.invoice_id.in_(invoice_ids))
            .order_by(Payment.paid_at)
        )
        result = await self.session.execute(statement)
        payments_by_invoice: Dict[str, List[Payment]] = {}
        for payment in result.scalars().all():
            payments_by_invoice.setdefault(payment.invoice_id, []).append(payment)
        return payments_by_invoice
