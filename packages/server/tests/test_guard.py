"""
Route guard tests (pure, no database).

Tests cover:
- Public paths, missing session, inactive accounts
- Role allow-lists, organization scoping and route permissions
- Redirect targets and the recorded state trail
"""

from __future__ import annotations

import uuid

import pytest

from app.core.guard import evaluate_route, extract_path_org_id
from listing_shared.schemas.access import DenyReason, GuardState, RedirectSignal
from listing_shared.schemas.users import SessionUser, UserStatus


def make_user(role="issuer", status=UserStatus.ACTIVE, organization_id="org-1", **kw):
    return SessionUser(
        user_id=uuid.uuid4(),
        email="someone@example.com",
        role=role,
        status=status,
        organization_id=organization_id,
        **kw,
    )


class TestOrgExtraction:

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/dashboard/issuer/org-2", "org-2"),
            ("/dashboard/sponsor/abc/listings", "abc"),
            ("/dashboard/exchange/x1/", "x1"),
            ("/orgs/acme/settings", "acme"),
            ("/api/v1/orgs/acme", "acme"),
            ("/dashboard/issuer/settings", None),
            ("/dashboard/sponsor/profile", None),
            ("/dashboard/documents", None),
            ("/dashboard/admin/issuers/123", None),
        ],
    )
    def test_extract(self, path, expected):
        assert extract_path_org_id(path) == expected


class TestEvaluateRoute:

    def test_public_path_needs_no_session(self):
        decision = evaluate_route(None, "/sign-in")
        assert decision.authorized
        assert decision.signal == RedirectSignal.NONE

    def test_no_session_redirects_to_sign_in(self):
        decision = evaluate_route(None, "/dashboard/documents")
        assert decision.state == GuardState.DENIED
        assert decision.signal == RedirectSignal.SIGN_IN
        assert decision.reason == DenyReason.NO_SESSION
        assert decision.redirect_to == "/sign-in?redirectedFrom=/dashboard/documents"
        assert decision.trail == [GuardState.UNAUTHENTICATED, GuardState.DENIED]

    @pytest.mark.parametrize("status", [UserStatus.PENDING, UserStatus.SUSPENDED])
    def test_inactive_account_goes_to_pending_approval(self, status):
        decision = evaluate_route(make_user(status=status), "/dashboard")
        assert not decision.authorized
        assert decision.signal == RedirectSignal.PENDING_APPROVAL
        assert decision.redirect_to == "/approval-pending"
        assert decision.reason == DenyReason.ACCOUNT_NOT_ACTIVE

    def test_inactive_check_precedes_role_check(self):
        user = make_user(role="issuer", status=UserStatus.PENDING)
        decision = evaluate_route(user, "/dashboard/admin", allowed_roles=["admin"])
        assert decision.signal == RedirectSignal.PENDING_APPROVAL

    def test_issuer_on_other_org_is_denied(self):
        decision = evaluate_route(make_user(organization_id="org-1"), "/dashboard/issuer/org-2")
        assert not decision.authorized
        assert decision.signal == RedirectSignal.ACCESS_DENIED
        assert decision.reason == DenyReason.ORGANIZATION_MISMATCH
        assert decision.redirect_to == "/access-denied"

    def test_issuer_on_own_org_is_authorized(self):
        decision = evaluate_route(make_user(organization_id="org-1"), "/dashboard/issuer/org-1/listings")
        assert decision.authorized
        assert decision.trail == [
            GuardState.UNAUTHENTICATED,
            GuardState.CHECKING,
            GuardState.AUTHORIZED,
        ]

    def test_user_without_org_is_denied_org_path(self):
        decision = evaluate_route(make_user(organization_id=None), "/orgs/org-1")
        assert decision.reason == DenyReason.ORGANIZATION_MISMATCH

    def test_admin_bypasses_org_scoping(self):
        admin = make_user(role="admin", organization_id=None)
        decision = evaluate_route(admin, "/dashboard/issuer/org-2")
        assert decision.authorized

    def test_role_not_in_allow_list(self):
        decision = evaluate_route(make_user(role="exchange"), "/dashboard/listings", ["issuer"])
        assert decision.reason == DenyReason.ROLE_NOT_ALLOWED
        assert decision.signal == RedirectSignal.ACCESS_DENIED

    def test_admin_is_not_exempt_from_allow_list(self):
        admin = make_user(role="admin")
        decision = evaluate_route(admin, "/dashboard/issuer/org-1", ["issuer"])
        assert decision.reason == DenyReason.ROLE_NOT_ALLOWED

    def test_role_check_reported_before_org_mismatch(self):
        decision = evaluate_route(make_user(role="exchange"), "/dashboard/issuer/org-9", ["issuer"])
        assert decision.reason == DenyReason.ROLE_NOT_ALLOWED

    def test_allow_list_accepts_enum_values(self):
        from listing_shared.schemas.common import AccountType

        decision = evaluate_route(make_user(), "/dashboard", [AccountType.ISSUER])
        assert decision.authorized

    def test_missing_route_permission(self):
        decision = evaluate_route(make_user(role="issuer"), "/dashboard/admin/approvals")
        assert decision.reason == DenyReason.MISSING_PERMISSION
        assert decision.signal == RedirectSignal.ACCESS_DENIED

    def test_admin_reaches_admin_pages(self):
        decision = evaluate_route(make_user(role="admin"), "/dashboard/admin/approvals")
        assert decision.authorized

    @pytest.mark.parametrize(
        "path",
        ["/dashboard//issuer/org-2", "/dashboard/issuer//org-2/", "/dashboard/sponsor/../issuer/org-2"],
    )
    def test_slashes_and_dot_segments_keep_org_scoping(self, path):
        decision = evaluate_route(make_user(organization_id="org-1"), path, ["issuer"])
        assert not decision.authorized
        assert decision.reason == DenyReason.ORGANIZATION_MISMATCH
        assert decision.path == "/dashboard/issuer/org-2"

    @pytest.mark.parametrize("path", ["/dashboard//admin/users", "//dashboard/admin///users/7"])
    def test_slashes_keep_route_permissions(self, path):
        decision = evaluate_route(make_user(role="issuer"), path)
        assert not decision.authorized
        assert decision.reason == DenyReason.MISSING_PERMISSION

    def test_unknown_role_is_fail_closed_on_gated_route(self):
        decision = evaluate_route(make_user(role="superuser"), "/dashboard/documents")
        assert decision.reason == DenyReason.MISSING_PERMISSION

    def test_query_string_ignored(self):
        decision = evaluate_route(make_user(), "/dashboard/issuer/org-1?tab=docs")
        assert decision.authorized
        assert decision.path == "/dashboard/issuer/org-1"

    def test_stateless(self):
        user = make_user()
        first = evaluate_route(user, "/dashboard/issuer/org-2")
        second = evaluate_route(user, "/dashboard/issuer/org-2")
        assert first == second
