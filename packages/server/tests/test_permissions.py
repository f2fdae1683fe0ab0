"""
Unit tests for the role/permission table and evaluator.

Tests cover:
- Table contents per account type
- has_permission / can_access_feature, including unknown inputs
- Route permission lookup with parent fallback
"""

from __future__ import annotations

import pytest

from app.core.permissions import (
    ROLE_PERMISSIONS,
    can_access_feature,
    get_role_permissions,
    has_permission,
    normalize_path,
    required_permissions_for_path,
)
from listing_shared.schemas.common import AccountType, Permission


class TestRolePermissionTable:

    def test_every_account_type_has_an_entry(self):
        assert set(ROLE_PERMISSIONS) == set(AccountType)

    def test_admin_holds_every_permission(self):
        assert get_role_permissions(AccountType.ADMIN) == frozenset(Permission)

    def test_base_permissions_shared_by_non_admins(self):
        base = {
            Permission.VIEW_DASHBOARD,
            Permission.VIEW_DOCUMENTS,
            Permission.VIEW_KNOWLEDGE_BASE,
            Permission.VIEW_SETTINGS,
        }
        for role in (AccountType.EXCHANGE_SPONSOR, AccountType.EXCHANGE, AccountType.ISSUER):
            assert base <= get_role_permissions(role)

    def test_issuer_set(self):
        assert get_role_permissions("issuer") == frozenset({
            Permission.VIEW_DASHBOARD,
            Permission.VIEW_DOCUMENTS,
            Permission.UPLOAD_DOCUMENTS,
            Permission.VIEW_KNOWLEDGE_BASE,
            Permission.VIEW_SETTINGS,
        })

    def test_exchange_reviews_documents(self):
        perms = get_role_permissions(AccountType.EXCHANGE)
        assert Permission.APPROVE_DOCUMENTS in perms
        assert Permission.REJECT_DOCUMENTS in perms
        assert Permission.UPLOAD_DOCUMENTS not in perms

    def test_sponsor_creates_knowledge_base(self):
        perms = get_role_permissions(AccountType.EXCHANGE_SPONSOR)
        assert Permission.CREATE_KNOWLEDGE_BASE in perms
        assert Permission.VIEW_EXCHANGES in perms
        assert Permission.APPROVE_DOCUMENTS not in perms

    def test_only_admin_manages_approvals(self):
        for role in AccountType:
            expected = role == AccountType.ADMIN
            assert has_permission(role, Permission.APPROVE_ORGANIZATIONS) is expected
            assert has_permission(role, Permission.APPROVE_USERS) is expected

    def test_edit_knowledge_base_is_admin_only(self):
        holders = [r for r in AccountType if has_permission(r, Permission.EDIT_KNOWLEDGE_BASE)]
        assert holders == [AccountType.ADMIN]

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS[AccountType.ISSUER] = frozenset(Permission)  # type: ignore[index]


class TestEvaluator:

    def test_issuer_can_upload(self):
        assert has_permission("issuer", "upload_documents")

    def test_issuer_cannot_edit_knowledge_base(self):
        assert not has_permission("issuer", Permission.EDIT_KNOWLEDGE_BASE)

    @pytest.mark.parametrize("role", ["", "superuser", None, "ADMIN"])
    def test_unknown_role_has_nothing(self, role):
        assert get_role_permissions(role) == frozenset()
        assert not has_permission(role, Permission.VIEW_DASHBOARD)

    def test_unknown_permission_is_denied(self):
        assert not has_permission("admin", "launch_rockets")

    def test_can_access_feature_requires_all(self):
        assert can_access_feature(
            "exchange", [Permission.APPROVE_DOCUMENTS, Permission.REJECT_DOCUMENTS]
        )
        assert not can_access_feature(
            "exchange", [Permission.APPROVE_DOCUMENTS, Permission.UPLOAD_DOCUMENTS]
        )

    def test_empty_requirement_is_unrestricted(self):
        assert can_access_feature("issuer", [])
        assert can_access_feature("nobody", [])

    def test_unknown_entry_in_requirement_denies(self):
        assert not can_access_feature("admin", [Permission.VIEW_DASHBOARD, "bogus"])


class TestRoutePermissions:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/dashboard/", "/dashboard"),
            ("/dashboard/documents?page=2", "/dashboard/documents"),
            ("/dashboard#top", "/dashboard"),
            ("/", "/"),
            ("", "/"),
            ("/dashboard//admin///users", "/dashboard/admin/users"),
            ("//dashboard/issuer/", "/dashboard/issuer"),
            ("/dashboard/./documents/../admin", "/dashboard/admin"),
            ("/../../dashboard", "/dashboard"),
        ],
    )
    def test_normalize_path(self, raw, expected):
        assert normalize_path(raw) == expected

    def test_exact_match(self):
        assert required_permissions_for_path("/dashboard/admin/settings") == (
            Permission.MANAGE_SETTINGS,
        )

    def test_parent_fallback(self):
        assert required_permissions_for_path("/dashboard/admin/users/123/edit") == (
            Permission.MANAGE_USERS,
        )
        assert required_permissions_for_path("/dashboard/documents/abc") == (
            Permission.VIEW_DOCUMENTS,
        )

    def test_unlisted_path_is_unrestricted(self):
        assert required_permissions_for_path("/dashboard/issuer/abc") == ()
        assert required_permissions_for_path("/dashboard") == ()

    def test_approvals_page_needs_both_permissions(self):
        required = required_permissions_for_path("/dashboard/admin/approvals")
        assert can_access_feature("admin", required)
        assert not can_access_feature("exchange", required)
