"""
Organization-related Pydantic schemas shared between server and clients.

Covers: organization types, the status lifecycle, approval requests,
approval history and pending-approval listings.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OrganizationType(str, Enum):
    SPONSOR = "sponsor"
    ISSUER = "issuer"
    EXCHANGE = "exchange"


class OrgStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


# ---------------------------------------------------------------------------
# Lifecycle transitions
# ---------------------------------------------------------------------------

# Legal targets per current status. Re-applying the current status is allowed;
# nothing returns to pending.
ORG_TRANSITIONS: dict[OrgStatus, list[OrgStatus]] = {
    OrgStatus.PENDING: [OrgStatus.ACTIVE, OrgStatus.SUSPENDED],
    OrgStatus.ACTIVE: [OrgStatus.ACTIVE, OrgStatus.SUSPENDED],
    OrgStatus.SUSPENDED: [OrgStatus.ACTIVE, OrgStatus.SUSPENDED],
}

# Statuses an approver may request.
DECISION_STATUSES = frozenset({OrgStatus.ACTIVE, OrgStatus.SUSPENDED})


def can_transition(current: OrgStatus, new: OrgStatus) -> bool:
    return new in ORG_TRANSITIONS.get(current, [])


def is_rejection(current: OrgStatus, new: OrgStatus) -> bool:
    """Suspending an organization that was never approved is a rejection."""
    return current == OrgStatus.PENDING and new == OrgStatus.SUSPENDED


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgStatusUpdateRequest(BaseModel):
    new_status: OrgStatus
    reason: Optional[str] = Field(
        None,
        max_length=2000,
        description="Required when rejecting a pending organization",
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrganizationSnapshot(BaseModel):
    id: uuid.UUID
    type: OrganizationType
    name: str
    status: OrgStatus
    created_by: Optional[uuid.UUID] = None
    admin_user_id: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[uuid.UUID] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[uuid.UUID] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrgStatusUpdateResponse(BaseModel):
    organization: OrganizationSnapshot
    admin_assigned: bool = False


class PendingOrganization(BaseModel):
    id: uuid.UUID
    name: str
    status: OrgStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class PendingApprovals(BaseModel):
    sponsors: list[PendingOrganization] = Field(default_factory=list)
    issuers: list[PendingOrganization] = Field(default_factory=list)
    exchanges: list[PendingOrganization] = Field(default_factory=list)


class ApprovalHistoryItem(BaseModel):
    id: int
    organization_id: uuid.UUID
    organization_type: OrganizationType
    new_status: OrgStatus
    changed_by: uuid.UUID
    reason: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApprovalHistoryResponse(BaseModel):
    data: list[ApprovalHistoryItem]
