from enum import Enum


class AccountType(str, Enum):
    """Account type of a user. Governs the default permission set."""
    ADMIN = "admin"
    EXCHANGE_SPONSOR = "exchange_sponsor"
    EXCHANGE = "exchange"
    ISSUER = "issuer"


class Permission(str, Enum):
    # Dashboard
    VIEW_DASHBOARD = "view_dashboard"

    # User management
    MANAGE_USERS = "manage_users"
    APPROVE_USERS = "approve_users"
    REJECT_USERS = "reject_users"
    VIEW_USER_REQUESTS = "view_user_requests"

    # Organization management
    MANAGE_ORGANIZATIONS = "manage_organizations"
    APPROVE_ORGANIZATIONS = "approve_organizations"
    REJECT_ORGANIZATIONS = "reject_organizations"
    VIEW_ORGANIZATION_REQUESTS = "view_organization_requests"

    # Documents
    VIEW_DOCUMENTS = "view_documents"
    UPLOAD_DOCUMENTS = "upload_documents"
    APPROVE_DOCUMENTS = "approve_documents"
    REJECT_DOCUMENTS = "reject_documents"

    # Knowledge base
    CREATE_KNOWLEDGE_BASE = "create_knowledge_base"
    VIEW_KNOWLEDGE_BASE = "view_knowledge_base"
    EDIT_KNOWLEDGE_BASE = "edit_knowledge_base"

    # Settings
    MANAGE_SETTINGS = "manage_settings"
    VIEW_SETTINGS = "view_settings"

    # Exchanges
    MANAGE_EXCHANGES = "manage_exchanges"
    VIEW_EXCHANGES = "view_exchanges"


class MembershipRole(str, Enum):
    """Role carried on a user <-> organization membership link."""
    ADMIN = "admin"
    EMPLOYEE = "employee"
    ADVISOR = "advisor"
