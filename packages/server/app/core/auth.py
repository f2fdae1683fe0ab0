"""
Session resolution and authorization dependencies.

Supports:
- Verifying session JWTs issued by the identity provider (cookie or Bearer)
- Resolving the caller into a SessionUser from the users table
- Route guard and feature-permission dependencies for API routes

Credentials are never checked here; sign-in belongs to the identity provider.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import get_session
from app.core.errors import AccessDenied, ErrorKind
from app.core.guard import evaluate_route
from app.core.permissions import can_access_feature
from app.models.user import User
from listing_shared.schemas.access import REDIRECT_PATHS, GuardDecision, RedirectSignal
from listing_shared.schemas.common import Permission
from listing_shared.schemas.users import SessionUser, UserStatus

log = structlog.get_logger()

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def create_session_token(
    user_id: uuid.UUID,
    *,
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a session JWT. Used by local scripts and tests in place of the identity provider."""
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str, settings: Settings | None = None) -> dict:
    """Decode and verify a session JWT. Raises jwt.PyJWTError on failure."""
    settings = settings or get_settings()
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def _token_from_request(
    request: Request, authorization: Optional[str], settings: Settings
) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(settings.session_cookie_name)


def to_session_user(user: User) -> SessionUser:
    return SessionUser(
        user_id=user.id,
        email=user.email,
        role=user.account_type,
        status=UserStatus(user.status),
        organization_id=str(user.organization_id) if user.organization_id else None,
        is_org_admin=user.is_org_admin,
    )


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

async def get_session_user(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
    session: AsyncSession = Depends(get_session),
) -> Optional[SessionUser]:
    """Resolve the caller, or ``None`` when there is no valid session.

    An invalid or expired token counts as no session; the guard turns that
    into a sign-in redirect.
    """
    settings: Settings = request.app.state.settings
    token = _token_from_request(request, authorization, settings)
    if not token:
        return None

    try:
        payload = decode_session_token(token, settings)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        log.info("auth.invalid_session", error=type(exc).__name__)
        return None

    user = await session.get(User, user_id)
    if user is None:
        log.info("auth.unknown_user", user_id=str(user_id))
        return None

    session_user = to_session_user(user)
    request.state.session_user = session_user
    return session_user


def raise_for_decision(decision: GuardDecision) -> None:
    """Turn a denied guard decision into an HTTP error carrying the redirect."""
    if decision.authorized:
        return
    kind = (
        ErrorKind.UNAUTHENTICATED
        if decision.signal == RedirectSignal.SIGN_IN
        else ErrorKind.FORBIDDEN
    )
    message = {
        RedirectSignal.SIGN_IN: "Authentication required",
        RedirectSignal.PENDING_APPROVAL: "Account is awaiting approval",
        RedirectSignal.ACCESS_DENIED: "Access denied",
    }.get(decision.signal, "Access denied")
    raise AccessDenied(
        kind,
        message,
        redirect_to=decision.redirect_to,
        details={"reason": decision.reason.value} if decision.reason else None,
    )


# ---------------------------------------------------------------------------
# Authorization dependencies
# ---------------------------------------------------------------------------

def require_route(allowed_roles: Sequence[str] = ()):
    """Run the route guard against the request path."""

    async def dependency(
        request: Request,
        user: Optional[SessionUser] = Depends(get_session_user),
    ) -> SessionUser:
        decision = evaluate_route(user, request.url.path, allowed_roles)
        raise_for_decision(decision)
        return user

    return dependency


async def require_active_user(
    user: Optional[SessionUser] = Depends(get_session_user),
) -> SessionUser:
    """Any signed-in, approved account."""
    if user is None:
        raise AccessDenied(
            ErrorKind.UNAUTHENTICATED,
            "Authentication required",
            redirect_to=REDIRECT_PATHS[RedirectSignal.SIGN_IN],
        )
    if user.status != UserStatus.ACTIVE:
        raise AccessDenied(
            ErrorKind.FORBIDDEN,
            "Account is awaiting approval",
            redirect_to=REDIRECT_PATHS[RedirectSignal.PENDING_APPROVAL],
        )
    return user


def require_permissions(*permissions: Permission):
    """Require an active account whose role holds every listed permission."""

    async def dependency(
        user: SessionUser = Depends(require_active_user),
    ) -> SessionUser:
        if not can_access_feature(user.role, permissions):
            log.warning(
                "auth.permission_denied",
                user_id=str(user.user_id),
                role=user.role,
                required=[p.value for p in permissions],
            )
            raise AccessDenied(
                ErrorKind.FORBIDDEN,
                "Insufficient permissions",
                redirect_to=REDIRECT_PATHS[RedirectSignal.ACCESS_DENIED],
            )
        return user

    return dependency
