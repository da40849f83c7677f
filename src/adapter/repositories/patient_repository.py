"""SQLAlchemy Patient Repository Implementation"""

from typing import Dict, List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.patient_repository import PatientRepository
from src.domain.patient import Patient


class SqlAlchemyPatientRepository(PatientRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: str, patient_id: str) -> Optional[Patient]:
        statement = (
            select(Patient)
            .where(Patient.id == patient_id)
            .where(Patient.tenant_id == tenant_id)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_ids(self, tenant_id: str, patient_ids: List[str]) -> Dict[str, Patient]:
        if not patient_ids:
            return {}
        statement = (
            select(Patient)
            .where(Patient.id.in_(patient_ids))
            .where(Patient.tenant_id == tenant_id)
        )
        result = await self.session.execute(statement)
        return {patient.id: patient for patient in result.scalars().all()}
