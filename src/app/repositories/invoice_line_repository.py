"""Invoice Line Repository Interface

Defines the contract for invoice line persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Dict, List
from src.domain.invoice_line import InvoiceLine


class InvoiceLineRepository(ABC):
    """
    Repository interface for InvoiceLine persistence

    Lines are append-only: there is no update operation.
    """

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceLine]:
        """
        Retrieve all line items for an invoice, in insertion order

        Args:
            invoice_id: Invoice ID

        Returns:
            List of InvoiceLine items
        """
        pass

    @abstractmethod
    async def get_by_invoice_ids(self, invoice_ids: List[str]) -> Dict[str, List[InvoiceLine]]:
        """
        Retrieve line items for several invoices at once

        Returns:
            Mapping invoice_id -> lines (missing ids map to nothing)
        """
        pass

    @abstractmethod
    async def create(self, invoice_line: InvoiceLine) -> InvoiceLine:
        """
        Create a new invoice line item

        Args:
            invoice_line: InvoiceLine entity to persist

        Returns:
            Created InvoiceLine
        """
        pass
