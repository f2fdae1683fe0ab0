# SQLModel definitions — imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import ORGANIZATION_MODELS, Exchange, Issuer, OrganizationBase, Sponsor  # noqa: F401
from .user import User  # noqa: F401
from .membership import OrgMembership  # noqa: F401
from .approval_history import ApprovalHistory, UserStatusHistory  # noqa: F401
