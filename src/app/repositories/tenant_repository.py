"""Tenant Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.tenant import Tenant


class TenantRepository(ABC):
    """Read-only access to tenants"""

    @abstractmethod
    async def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        pass
