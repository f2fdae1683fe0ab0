"""
Per-request route authorization.

``evaluate_route`` is the single decision function behind every protected
page and API route: it takes the caller's session (or ``None``), the requested
path and an optional allow-list of account types, and returns a
:class:`GuardDecision`. It keeps no state between calls.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import quote

import structlog

from app.core.permissions import (
    can_access_feature,
    normalize_path,
    required_permissions_for_path,
)
from listing_shared.schemas.access import (
    REDIRECT_PATHS,
    DenyReason,
    GuardDecision,
    GuardState,
    RedirectSignal,
)
from listing_shared.schemas.users import SessionUser, UserStatus

log = structlog.get_logger()

PUBLIC_PATHS = frozenset({
    "/",
    "/sign-in",
    "/sign-up",
    "/auth/callback",
    "/auth/error",
    "/approval-pending",
    "/access-denied",
    "/health",
})

# Sub-pages of the per-type dashboards that are not organization ids.
_STATIC_DASHBOARD_SEGMENTS = frozenset({
    "analytics",
    "billing",
    "clients",
    "listings",
    "profile",
    "settings",
    "tools",
})

_DASHBOARD_ORG_RE = re.compile(r"^/dashboard/(?:sponsor|issuer|exchange)/(?P<org_id>[^/]+)(?:/|$)")
_ORGS_RE = re.compile(r"^(?:/api/v1)?/orgs/(?P<org_id>[^/]+)(?:/|$)")


def extract_path_org_id(path: str) -> Optional[str]:
    """Return the organization id embedded in ``path``, if any."""
    normalized = normalize_path(path)
    match = _DASHBOARD_ORG_RE.match(normalized)
    if match and match.group("org_id") not in _STATIC_DASHBOARD_SEGMENTS:
        return match.group("org_id")
    match = _ORGS_RE.match(normalized)
    if match:
        return match.group("org_id")
    return None


def _redirect_for(signal: RedirectSignal, path: str) -> str:
    target = REDIRECT_PATHS[signal]
    if signal == RedirectSignal.SIGN_IN:
        return f"{target}?redirectedFrom={quote(path, safe='/')}"
    return target


def _deny(
    path: str,
    trail: list[GuardState],
    signal: RedirectSignal,
    reason: DenyReason,
) -> GuardDecision:
    return GuardDecision(
        path=path,
        state=GuardState.DENIED,
        signal=signal,
        reason=reason,
        redirect_to=_redirect_for(signal, path),
        trail=[*trail, GuardState.DENIED],
    )


def evaluate_route(
    user: Optional[SessionUser],
    path: str,
    allowed_roles: Optional[Iterable[str]] = None,
) -> GuardDecision:
    """Decide whether ``user`` may open ``path``.

    Order of checks: public path, session present, account active, then the
    role allow-list, organization scoping and route permissions together.
    Platform admins bypass organization scoping only.
    """
    normalized = normalize_path(path)
    trail = [GuardState.UNAUTHENTICATED]

    if normalized in PUBLIC_PATHS:
        return GuardDecision(
            path=normalized,
            state=GuardState.AUTHORIZED,
            trail=[*trail, GuardState.AUTHORIZED],
        )

    if user is None:
        log.info("guard.denied", path=normalized, reason=DenyReason.NO_SESSION.value)
        return _deny(normalized, trail, RedirectSignal.SIGN_IN, DenyReason.NO_SESSION)

    trail.append(GuardState.CHECKING)

    if user.status != UserStatus.ACTIVE:
        log.info(
            "guard.denied",
            path=normalized,
            user_id=str(user.user_id),
            reason=DenyReason.ACCOUNT_NOT_ACTIVE.value,
            status=str(user.status.value),
        )
        return _deny(
            normalized, trail, RedirectSignal.PENDING_APPROVAL, DenyReason.ACCOUNT_NOT_ACTIVE
        )

    roles = [str(getattr(r, "value", r)) for r in (allowed_roles or [])]
    role_allowed = not roles or user.role in roles

    path_org_id = extract_path_org_id(normalized)
    org_match = (
        path_org_id is None
        or user.is_platform_admin
        or (user.organization_id is not None and path_org_id == str(user.organization_id))
    )

    permitted = can_access_feature(user.role, required_permissions_for_path(normalized))

    if role_allowed and org_match and permitted:
        return GuardDecision(
            path=normalized,
            state=GuardState.AUTHORIZED,
            trail=[*trail, GuardState.AUTHORIZED],
        )

    if not role_allowed:
        reason = DenyReason.ROLE_NOT_ALLOWED
    elif not org_match:
        reason = DenyReason.ORGANIZATION_MISMATCH
    else:
        reason = DenyReason.MISSING_PERMISSION

    log.info(
        "guard.denied",
        path=normalized,
        user_id=str(user.user_id),
        role=user.role,
        reason=reason.value,
    )
    return _deny(normalized, trail, RedirectSignal.ACCESS_DENIED, reason)
