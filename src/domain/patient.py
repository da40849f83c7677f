"""Patient Domain Entity

Owned by the patient records module; the invoicing core only reads it to
print the patient name and to attach it to invoice reads.
"""

from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel, generate_uuid


class Patient(BaseModel, table=True):
    """Patient - billed person of an invoice"""

    __tablename__ = "patients"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Patient identifier"
    )

    tenant_id: str = Field(
        index=True,
        description="Tenant ID"
    )

    first_name: Optional[str] = Field(default=None)
    last_name: Optional[str] = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
