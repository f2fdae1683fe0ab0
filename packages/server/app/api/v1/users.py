"""
User approval endpoints.

PATCH  /api/v1/users/{userId}/status — Approve, reject, suspend or reactivate an account
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
from listing_shared.schemas.users import (
    SessionUser,
    UserResponse,
    UserStatus,
    UserStatusUpdateRequest,
)

router = APIRouter()


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: uuid.UUID,
    body: UserStatusUpdateRequest,
    user: SessionUser = Depends(require_permissions(Permission.APPROVE_USERS)),
    session: AsyncSession = Depends(get_session),
):
    """Transition a user account and record it in the user status history."""
    if body.new_status == UserStatus.SUSPENDED and not has_permission(
        user.role, Permission.REJECT_USERS
    ):
        raise AccessDenied(
            ErrorKind.FORBIDDEN,
            "Insufficient permissions",
            redirect_to=REDIRECT_PATHS[RedirectSignal.ACCESS_DENIED],
        )

    result = await approval_service.update_user_status(
        session,
        user_id=user_id,
        new_status=body.new_status,
        acting_user_id=user.user_id,
        reason=body.reason,
    )
    if not result.ok:
        raise AppError.from_failure(result.failure)
    return UserResponse.model_validate(result.user)
