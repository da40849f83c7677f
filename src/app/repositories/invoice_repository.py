"""Invoice Repository Interface

Defines the contract for invoice persistence operations. Every method is
scoped by tenant_id.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Provides tenant-scoped access to invoices for invoicing operations.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        pass

    @abstractmethod
    async def get_by_id(self, tenant_id: str, invoice_id: str) -> Optional[Invoice]:
        """
        Retrieve invoice by ID within a tenant

        Args:
            tenant_id: Tenant identifier
            invoice_id: Invoice ID

        Returns:
            Invoice if found for this tenant, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_tenant(
        self,
        tenant_id: str,
        patient_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        """
        Retrieve invoices of a tenant, newest issue date first

        Args:
            tenant_id: Tenant identifier
            patient_id: Optional filter by patient
            status: Optional filter by status

        Returns:
            List of invoices
        """
        pass

    @abstractmethod
    async def update_fields(
        self, tenant_id: str, invoice_id: str, values: Dict[str, Any]
    ) -> Optional[Invoice]:
        """
        Persist new values for an invoice

        Args:
            tenant_id: Tenant identifier
            invoice_id: Invoice ID
            values: Column values to write

        Returns:
            Reloaded Invoice, None if it does not exist for this tenant
        """
        pass

    @abstractmethod
    async def mark_overdue(self, tenant_id: str, now: datetime) -> List[Invoice]:
        """
        Move SENT invoices whose due date is before now to OVERDUE

        Args:
            tenant_id: Tenant identifier
            now: Reference time of the sweep

        Returns:
            Invoices updated by this call
        """
        pass

    @abstractmethod
    async def list_tenant_ids_with_overdue(self, now: datetime) -> List[str]:
        """
        Tenants owning at least one SENT invoice due before now

        Not tenant scoped: used by the overdue reminder worker to pick which
        tenants to sweep.

        Args:
            now: Reference time of the sweep

        Returns:
            Distinct tenant ids, sorted
        """
        pass

    @abstractmethod
    async def delete(self, tenant_id: str, invoice_id: str) -> bool:
        """
        Delete an invoice with its lines and payments

        Returns:
            True if an invoice was deleted
        """
        pass
