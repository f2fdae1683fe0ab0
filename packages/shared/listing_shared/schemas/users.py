"""User status and session schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, UUID4

from .common import AccountType


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class SessionUser(BaseModel):
    """What the identity provider tells us about the current caller."""
    user_id: uuid.UUID
    email: Optional[str] = None
    role: str  # AccountType value; unknown strings are evaluated fail-closed
    status: UserStatus
    organization_id: Optional[str] = None
    is_org_admin: bool = False

    @property
    def is_platform_admin(self) -> bool:
        return self.role == AccountType.ADMIN.value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserStatusUpdateRequest(BaseModel):
    new_status: UserStatus
    reason: Optional[str] = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: UUID4
    email: Optional[str] = None
    account_type: AccountType
    status: UserStatus
    organization_id: Optional[UUID4] = None
    is_org_admin: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    data: List[UserResponse]
