"""Patient Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from src.domain.patient import Patient


class PatientRepository(ABC):
    """Read-only access to patients of a tenant"""

    @abstractmethod
    async def get_by_id(self, tenant_id: str, patient_id: str) -> Optional[Patient]:
        pass

    @abstractmethod
    async def get_by_ids(self, tenant_id: str, patient_ids: List[str]) -> Dict[str, Patient]:
        pass
