"""
Access endpoints consumed by the presentation layer.

POST   /api/v1/access/check       — Route guard decision for a page path
GET    /api/v1/access/permissions — The caller's role and permission set
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from app.core.auth import get_session_user, require_active_user
from app.core.guard import evaluate_route
from app.core.permissions import get_role_permissions
from listing_shared.schemas.access import GuardDecision, PermissionsResponse, RouteAccessRequest
from listing_shared.schemas.users import SessionUser

router = APIRouter()


@router.post("/check", response_model=GuardDecision)
async def check_route(
    body: RouteAccessRequest,
    user: Optional[SessionUser] = Depends(get_session_user),
):
    """Evaluate the route guard. Always 200; the decision carries the redirect."""
    return evaluate_route(user, body.path, body.allowed_roles)


@router.get("/permissions", response_model=PermissionsResponse)
async def my_permissions(user: SessionUser = Depends(require_active_user)):
    permissions = sorted(get_role_permissions(user.role), key=lambda p: p.value)
    return PermissionsResponse(role=user.role, permissions=permissions)
