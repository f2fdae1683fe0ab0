"""Route guard and permission lookup schemas."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .common import Permission


class GuardState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CHECKING = "checking"
    AUTHORIZED = "authorized"
    DENIED = "denied"


class RedirectSignal(str, Enum):
    NONE = "none"
    SIGN_IN = "sign_in"
    PENDING_APPROVAL = "pending_approval"
    ACCESS_DENIED = "access_denied"


class DenyReason(str, Enum):
    NO_SESSION = "no_session"
    ACCOUNT_NOT_ACTIVE = "account_not_active"
    ROLE_NOT_ALLOWED = "role_not_allowed"
    ORGANIZATION_MISMATCH = "organization_mismatch"
    MISSING_PERMISSION = "missing_permission"


REDIRECT_PATHS: dict[RedirectSignal, str] = {
    RedirectSignal.SIGN_IN: "/sign-in",
    RedirectSignal.PENDING_APPROVAL: "/approval-pending",
    RedirectSignal.ACCESS_DENIED: "/access-denied",
}


class GuardDecision(BaseModel):
    path: str
    state: GuardState
    signal: RedirectSignal = RedirectSignal.NONE
    reason: Optional[DenyReason] = None
    redirect_to: Optional[str] = None
    trail: list[GuardState] = Field(default_factory=list)

    @property
    def authorized(self) -> bool:
        return self.state == GuardState.AUTHORIZED


class RouteAccessRequest(BaseModel):
    path: str = Field(..., min_length=1, max_length=2048)
    allowed_roles: list[str] = Field(default_factory=list)


class PermissionsResponse(BaseModel):
    role: str
    permissions: list[Permission]
