"""Tenant Domain Entity

A clinic or organization. Read-only to the invoicing core: only the display
name is used, for PDF branding.
"""

from sqlmodel import Field
from src.domain.base import BaseModel, generate_uuid


class Tenant(BaseModel, table=True):
    """Tenant - isolated clinic owning its invoices"""

    __tablename__ = "tenants"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Tenant identifier"
    )

    name: str = Field(
        description="Display name printed in invoice header and footer"
    )
