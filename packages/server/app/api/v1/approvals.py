"""
Approval API endpoints (platform admins).

GET    /api/v1/approvals/pending                        — Organizations awaiting a decision
PATCH  /api/v1/approvals/{organizationType}/{id}        — Approve, reject, suspend or reactivate
GET    /api/v1/approvals/{organizationType}/{id}/history — Audit trail for one organization
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_permissions
from app.core.database import get_session
from app.core.errors import AccessDenied, AppError, ErrorKind
from app.core.permissions import has_permission
from app.services import approvals as approval_service
from listing_shared.schemas.access import REDIRECT_PATHS, RedirectSignal
from listing_shared.schemas.common import Permission
from listing_shared.schemas.organizations import (
    ApprovalHistoryItem,
    ApprovalHistoryResponse,
    OrganizationType,
    OrgStatus,
    OrgStatusUpdateRequest,
    OrgStatusUpdateResponse,
    PendingApprovals,
)
from listing_shared.schemas.users import SessionUser

router = APIRouter()


@router.get("/pending", response_model=PendingApprovals)
async def list_pending(
    user: SessionUser = Depends(require_permissions(Permission.VIEW_ORGANIZATION_REQUESTS)),
    session: AsyncSession = Depends(get_session),
):
    """Pending sponsors, issuers and exchanges."""
    return await approval_service.list_pending_approvals(session)


@router.patch("/{organization_type}/{organization_id}", response_model=OrgStatusUpdateResponse)
async def update_status(
    organization_type: OrganizationType,
    organization_id: uuid.UUID,
    body: OrgStatusUpdateRequest,
    user: SessionUser = Depends(require_permissions(Permission.APPROVE_ORGANIZATIONS)),
    session: AsyncSession = Depends(get_session),
):
    """Transition an organization's status and record it in the audit trail."""
    if body.new_status == OrgStatus.SUSPENDED and not has_permission(
        user.role, Permission.REJECT_ORGANIZATIONS
    ):
        raise AccessDenied(
            ErrorKind.FORBIDDEN,
            "Insufficient permissions",
            redirect_to=REDIRECT_PATHS[RedirectSignal.ACCESS_DENIED],
        )

    result = await approval_service.update_organization_status(
        session,
        organization_id=organization_id,
        organization_type=organization_type,
        new_status=body.new_status,
        acting_user_id=user.user_id,
        reason=body.reason,
    )
    if not result.ok:
        raise AppError.from_failure(result.failure)

    return OrgStatusUpdateResponse(
        organization=result.organization,
        admin_assigned=result.admin_assigned,
    )


@router.get(
    "/{organization_type}/{organization_id}/history",
    response_model=ApprovalHistoryResponse,
)
async def get_history(
    organization_type: OrganizationType,
    organization_id: uuid.UUID,
    user: SessionUser = Depends(require_permissions(Permission.VIEW_ORGANIZATION_REQUESTS)),
    session: AsyncSession = Depends(get_session),
):
    org = await approval_service.get_organization(session, organization_id, organization_type)
    if org is None:
        raise AppError(ErrorKind.NOT_FOUND, f"{organization_type.value.capitalize()} not found")
    records = await approval_service.get_approval_history(
        session, organization_id, organization_type
    )
    return ApprovalHistoryResponse(
        data=[ApprovalHistoryItem.model_validate(r) for r in records]
    )
