"""Payment Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, List
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """Read access to payments attached to invoices"""

    @abstractmethod
    async def get_by_invoice_ids(self, invoice_ids: List[str]) -> Dict[str, List[Payment]]:
        """
        Retrieve payments for several invoices

        Returns:
            Mapping invoice_id -> payments
        """
        pass
