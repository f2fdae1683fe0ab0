"""User-Organization membership link."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import utcnow


class OrgMembership(SQLModel, table=True):
    __tablename__ = "org_memberships"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    organization_id: uuid.UUID = Field(primary_key=True)
    organization_type: str = Field(nullable=False)  # sponsor | issuer | exchange
    role: str = Field(nullable=False, default="employee")  # admin | employee | advisor
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
