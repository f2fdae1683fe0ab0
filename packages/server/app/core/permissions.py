"""
Role -> permission table and the pure evaluator functions over it.

The table is built once at import and exposed read-only. Every function here
is total: unknown roles, unknown permission strings and odd paths evaluate to
"no access" instead of raising.
"""

from __future__ import annotations

import posixpath
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from listing_shared.schemas.common import AccountType, Permission

RoleLike = Union[AccountType, str, None]
PermissionLike = Union[Permission, str]

_ALL = frozenset(Permission)

_BASE = frozenset({
    Permission.VIEW_DASHBOARD,
    Permission.VIEW_DOCUMENTS,
    Permission.VIEW_KNOWLEDGE_BASE,
    Permission.VIEW_SETTINGS,
})

# edit_knowledge_base belongs to admins only; no account type maps to the
# advisor membership that also holds it.
ROLE_PERMISSIONS: Mapping[AccountType, frozenset[Permission]] = MappingProxyType({
    AccountType.ADMIN: _ALL,
    AccountType.EXCHANGE_SPONSOR: _BASE | {
        Permission.UPLOAD_DOCUMENTS,
        Permission.CREATE_KNOWLEDGE_BASE,
        Permission.VIEW_EXCHANGES,
    },
    AccountType.EXCHANGE: _BASE | {
        Permission.APPROVE_DOCUMENTS,
        Permission.REJECT_DOCUMENTS,
        Permission.VIEW_EXCHANGES,
    },
    AccountType.ISSUER: _BASE | {
        Permission.UPLOAD_DOCUMENTS,
    },
})


# Presentation routes gated by feature permissions. A path without an entry
# inherits the requirement of its nearest listed parent.
ROUTE_PERMISSIONS: Mapping[str, tuple[Permission, ...]] = MappingProxyType({
    "/dashboard/admin": (Permission.MANAGE_USERS,),
    "/dashboard/admin/users": (Permission.MANAGE_USERS,),
    "/dashboard/admin/issuers": (Permission.MANAGE_USERS,),
    "/dashboard/admin/sponsors": (Permission.MANAGE_USERS,),
    "/dashboard/admin/exchanges": (Permission.VIEW_EXCHANGES,),
    "/dashboard/admin/exchanges/add": (Permission.MANAGE_EXCHANGES,),
    "/dashboard/admin/approvals": (
        Permission.VIEW_ORGANIZATION_REQUESTS,
        Permission.APPROVE_ORGANIZATIONS,
    ),
    "/dashboard/admin/settings": (Permission.MANAGE_SETTINGS,),
    "/dashboard/documents": (Permission.VIEW_DOCUMENTS,),
    "/dashboard/documents/upload": (Permission.UPLOAD_DOCUMENTS,),
    "/dashboard/knowledge-base": (Permission.VIEW_KNOWLEDGE_BASE,),
    "/dashboard/knowledge-base/create": (Permission.CREATE_KNOWLEDGE_BASE,),
    "/dashboard/settings": (Permission.VIEW_SETTINGS,),
})


def _as_role(role: RoleLike) -> Optional[AccountType]:
    if isinstance(role, AccountType):
        return role
    try:
        return AccountType(role)
    except ValueError:
        return None


def _as_permission(permission: PermissionLike) -> Optional[Permission]:
    if isinstance(permission, Permission):
        return permission
    try:
        return Permission(permission)
    except ValueError:
        return None


def get_role_permissions(role: RoleLike) -> frozenset[Permission]:
    """All permissions held by ``role``; empty for an unknown role."""
    account_type = _as_role(role)
    if account_type is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(account_type, frozenset())


def has_permission(role: RoleLike, permission: PermissionLike) -> bool:
    perm = _as_permission(permission)
    if perm is None:
        return False
    return perm in get_role_permissions(role)


def can_access_feature(role: RoleLike, required: Iterable[PermissionLike]) -> bool:
    """True iff ``role`` holds every permission in ``required``.

    No requirement means unrestricted, so an empty list is always allowed,
    even for an unknown role.
    """
    return all(has_permission(role, p) for p in required)


def normalize_path(path: str) -> str:
    """Drop query and fragment, collapse repeated slashes and resolve dot segments."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    return posixpath.normpath("/" + path.lstrip("/"))


def required_permissions_for_path(path: str) -> tuple[Permission, ...]:
    """Permissions required by a presentation path (exact, then nearest parent)."""
    normalized = normalize_path(path)
    if normalized in ROUTE_PERMISSIONS:
        return ROUTE_PERMISSIONS[normalized]

    parts = normalized.split("/")
    while len(parts) > 1:
        parts.pop()
        parent = "/".join(parts)
        if parent in ROUTE_PERMISSIONS:
            return ROUTE_PERMISSIONS[parent]
    return ()
