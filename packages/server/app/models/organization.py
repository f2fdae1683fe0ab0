"""Organization models: one table per organization type."""

from datetime import datetime
from typing import ClassVar, Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from listing_shared.schemas.organizations import OrganizationType

from .base import TimestampMixin, UUIDMixin


class OrganizationBase(UUIDMixin, TimestampMixin, SQLModel):
    """Columns shared by sponsors, issuers and exchanges."""

    name: str = Field(nullable=False, index=True)
    status: str = Field(default="pending", nullable=False, index=True)  # pending | active | suspended
    created_by: Optional[uuid.UUID] = Field(default=None)
    admin_user_id: Optional[uuid.UUID] = Field(default=None)
    approved_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    approved_by: Optional[uuid.UUID] = None
    rejected_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    rejected_by: Optional[uuid.UUID] = None
    rejection_reason: Optional[str] = None

    organization_type: ClassVar[OrganizationType]


class Sponsor(OrganizationBase, table=True):
    __tablename__ = "sponsors"
    organization_type: ClassVar[OrganizationType] = OrganizationType.SPONSOR


class Issuer(OrganizationBase, table=True):
    __tablename__ = "issuers"
    organization_type: ClassVar[OrganizationType] = OrganizationType.ISSUER


class Exchange(OrganizationBase, table=True):
    __tablename__ = "exchanges"
    organization_type: ClassVar[OrganizationType] = OrganizationType.EXCHANGE


# Closed mapping from organization type to its table. Never derive table
# names from request input.
ORGANIZATION_MODELS: dict[OrganizationType, type[OrganizationBase]] = {
    OrganizationType.SPONSOR: Sponsor,
    OrganizationType.ISSUER: Issuer,
    OrganizationType.EXCHANGE: Exchange,
}
