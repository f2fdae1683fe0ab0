"""User model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: Optional[str] = Field(default=None, unique=True, index=True)
    account_type: str = Field(nullable=False)  # admin | exchange_sponsor | exchange | issuer
    status: str = Field(default="pending", nullable=False, index=True)  # pending | active | suspended
    organization_id: Optional[uuid.UUID] = Field(default=None, index=True)
    is_org_admin: bool = Field(default=False, nullable=False)
