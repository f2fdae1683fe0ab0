"""Append-only audit records for status transitions.

Rows are inserted once per transition and never updated or deleted. The
integer key preserves insertion order when timestamps collide.
"""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import utcnow


class ApprovalHistory(SQLModel, table=True):
    __tablename__ = "approval_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: uuid.UUID = Field(nullable=False, index=True)
    organization_type: str = Field(nullable=False)
    new_status: str = Field(nullable=False)
    changed_by: uuid.UUID = Field(nullable=False)
    reason: Optional[str] = None
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )


class UserStatusHistory(SQLModel, table=True):
    __tablename__ = "user_status_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    new_status: str = Field(nullable=False)
    changed_by: uuid.UUID = Field(nullable=False)
    reason: Optional[str] = None
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
