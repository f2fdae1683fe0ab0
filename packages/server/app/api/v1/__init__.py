"""
API v1 Router
"""

from fastapi import APIRouter
from . import access, approvals, organizations, users

router = APIRouter()

router.include_router(access.router, prefix="/access", tags=["Access"])
router.include_router(approvals.router, prefix="/approvals", tags=["Approvals"])
router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(users.router, prefix="/users", tags=["Users"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/access/check",
            "/access/permissions",
            "/approvals/pending",
            "/approvals/{organizationType}/{id}",
            "/approvals/{organizationType}/{id}/history",
            "/organizations/{organizationType}/{id}",
            "/organizations/{organizationType}/{id}/member-requests",
            "/users/{userId}/status",
        ],
    }
