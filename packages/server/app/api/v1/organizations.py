"""
Organization endpoints.

GET    /api/v1/organizations/{organizationType}/{id}                 — Organization details
GET    /api/v1/organizations/{organizationType}/{id}/member-requests — Pending join requests
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_active_user
from app.core.database import get_session
from app.core.errors import AccessDenied, AppError, ErrorKind
from app.services import approvals as approval_service
from listing_shared.schemas.access import REDIRECT_PATHS, RedirectSignal
from listing_shared.schemas.organizations import OrganizationSnapshot, OrganizationType
from listing_shared.schemas.users import SessionUser, UserListResponse, UserResponse

router = APIRouter()


def _ensure_org_access(user: SessionUser, organization_id: uuid.UUID, *, admin_only: bool) -> None:
    """Platform admins see every organization; others only their own."""
    if user.is_platform_admin:
        return
    same_org = user.organization_id == str(organization_id)
    if not same_org or (admin_only and not user.is_org_admin):
        raise AccessDenied(
            ErrorKind.FORBIDDEN,
            "Access denied",
            redirect_to=REDIRECT_PATHS[RedirectSignal.ACCESS_DENIED],
        )


@router.get("/{organization_type}/{organization_id}", response_model=OrganizationSnapshot)
async def get_organization(
    organization_type: OrganizationType,
    organization_id: uuid.UUID,
    user: SessionUser = Depends(require_active_user),
    session: AsyncSession = Depends(get_session),
):
    _ensure_org_access(user, organization_id, admin_only=False)
    org = await approval_service.get_organization(session, organization_id, organization_type)
    if org is None:
        raise AppError(ErrorKind.NOT_FOUND, f"{organization_type.value.capitalize()} not found")
    return approval_service.snapshot(org)


@router.get(
    "/{organization_type}/{organization_id}/member-requests",
    response_model=UserListResponse,
)
async def list_member_requests(
    organization_type: OrganizationType,
    organization_id: uuid.UUID,
    user: SessionUser = Depends(require_active_user),
    session: AsyncSession = Depends(get_session),
):
    """Users waiting to join the organization (org admins and platform admins)."""
    _ensure_org_access(user, organization_id, admin_only=True)
    org = await approval_service.get_organization(session, organization_id, organization_type)
    if org is None:
        raise AppError(ErrorKind.NOT_FOUND, f"{organization_type.value.capitalize()} not found")
    users = await approval_service.list_member_requests(session, organization_id)
    return UserListResponse(data=[UserResponse.model_validate(u) for u in users])
