"""
Approval workflow: the only writer of organization and user status.

Every transition writes the new status and appends one audit record in the
caller's transaction. Operations return an :class:`ApprovalResult`; callers
branch on ``result.ok`` rather than catching exceptions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import ErrorKind, Failure
from app.models.approval_history import ApprovalHistory, UserStatusHistory
from app.models.base import utcnow
from app.models.membership import OrgMembership
from app.models.organization import ORGANIZATION_MODELS, OrganizationBase
from app.models.user import User
from listing_shared.schemas.common import MembershipRole
from listing_shared.schemas.organizations import (
    DECISION_STATUSES,
    OrganizationSnapshot,
    OrganizationType,
    OrgStatus,
    PendingApprovals,
    PendingOrganization,
    can_transition,
    is_rejection,
)
from listing_shared.schemas.users import UserStatus

log = structlog.get_logger()


@dataclass
class ApprovalResult:
    organization: Optional[OrganizationSnapshot] = None
    user: Optional[User] = None
    admin_assigned: bool = False
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _fail(kind: ErrorKind, message: str, **details) -> ApprovalResult:
    return ApprovalResult(
        failure=Failure(kind, message, {k: str(v) for k, v in details.items()})
    )


def snapshot(org: OrganizationBase) -> OrganizationSnapshot:
    return OrganizationSnapshot(
        id=org.id,
        type=org.organization_type,
        name=org.name,
        status=OrgStatus(org.status),
        created_by=org.created_by,
        admin_user_id=org.admin_user_id,
        approved_at=org.approved_at,
        approved_by=org.approved_by,
        rejected_at=org.rejected_at,
        rejected_by=org.rejected_by,
        rejection_reason=org.rejection_reason,
        created_at=org.created_at,
        updated_at=org.updated_at,
    )


def _parse_type(organization_type) -> Optional[OrganizationType]:
    try:
        return OrganizationType(organization_type)
    except ValueError:
        return None


def _parse_status(status) -> Optional[OrgStatus]:
    try:
        return OrgStatus(status)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_organization(
    session: AsyncSession,
    organization_id: uuid.UUID,
    organization_type: OrganizationType | str,
) -> Optional[OrganizationBase]:
    org_type = _parse_type(organization_type)
    if org_type is None:
        return None
    return await session.get(ORGANIZATION_MODELS[org_type], organization_id)


async def list_pending_approvals(session: AsyncSession) -> PendingApprovals:
    """Pending sponsors, issuers and exchanges, newest first."""
    buckets: dict[str, list[PendingOrganization]] = {}
    for org_type, model in ORGANIZATION_MODELS.items():
        result = await session.execute(
            select(model)
            .where(model.status == OrgStatus.PENDING.value)
            .order_by(model.created_at.desc())
        )
        buckets[f"{org_type.value}s"] = [
            PendingOrganization.model_validate(org) for org in result.scalars().all()
        ]
    return PendingApprovals(**buckets)


async def get_approval_history(
    session: AsyncSession,
    organization_id: uuid.UUID,
    organization_type: OrganizationType | str,
) -> list[ApprovalHistory]:
    """Audit records for one organization in the order they were appended."""
    result = await session.execute(
        select(ApprovalHistory)
        .where(
            ApprovalHistory.organization_id == organization_id,
            ApprovalHistory.organization_type == OrganizationType(organization_type).value,
        )
        .order_by(ApprovalHistory.created_at, ApprovalHistory.id)
    )
    return list(result.scalars().all())


async def list_member_requests(
    session: AsyncSession, organization_id: uuid.UUID
) -> list[User]:
    """Users waiting to join an organization (org admins excluded)."""
    result = await session.execute(
        select(User)
        .where(
            User.organization_id == organization_id,
            User.status == UserStatus.PENDING.value,
            User.is_org_admin == False,  # noqa: E712
        )
        .order_by(User.created_at)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

async def update_organization_status(
    session: AsyncSession,
    organization_id: uuid.UUID,
    organization_type: OrganizationType | str,
    new_status: OrgStatus | str,
    acting_user_id: uuid.UUID,
    reason: Optional[str] = None,
) -> ApprovalResult:
    """Move an organization to ``new_status`` and append an audit record.

    The first approval of an organization without an admin makes the acting
    user its admin and links them with an admin membership; later approvals
    leave the admin untouched. Re-applying the current status is accepted and
    still appends an audit record.
    """
    org_type = _parse_type(organization_type)
    if org_type is None:
        return _fail(
            ErrorKind.VALIDATION_ERROR,
            f"Unknown organization type '{organization_type}'",
            organization_type=organization_type,
        )

    target = _parse_status(new_status)
    if target not in DECISION_STATUSES:
        return _fail(
            ErrorKind.VALIDATION_ERROR,
            f"Invalid status '{new_status}'; expected active or suspended",
            new_status=new_status,
        )

    model = ORGANIZATION_MODELS[org_type]
    try:
        # Row lock serializes concurrent decisions on one organization.
        org = await session.get(
            model, organization_id, with_for_update=True, populate_existing=True
        )
    except SQLAlchemyError as exc:
        log.warning("org.status_read_failed", org_id=str(organization_id), error=str(exc))
        return _fail(ErrorKind.STORE_UNAVAILABLE, "Organization store unavailable, please retry")
    if org is None:
        return _fail(
            ErrorKind.NOT_FOUND,
            f"{org_type.value.capitalize()} not found",
            organization_id=organization_id,
            organization_type=org_type.value,
        )

    current = OrgStatus(org.status)
    if not can_transition(current, target):
        return _fail(
            ErrorKind.VALIDATION_ERROR,
            f"Cannot move {org_type.value} from '{current.value}' to '{target.value}'",
            current_status=current.value,
            new_status=target.value,
        )

    reason = reason.strip() if reason else None
    rejecting = is_rejection(current, target)
    if rejecting and not reason:
        return _fail(
            ErrorKind.VALIDATION_ERROR,
            "A reason is required when rejecting an organization",
            organization_id=organization_id,
        )

    now = utcnow()
    assign_admin = target == OrgStatus.ACTIVE and org.admin_user_id is None

    # Status write.
    try:
        org.status = target.value
        org.updated_at = now
        if target == OrgStatus.ACTIVE:
            org.approved_at = now
            org.approved_by = acting_user_id
        if rejecting:
            org.rejected_at = now
            org.rejected_by = acting_user_id
            org.rejection_reason = reason
        if org.created_by is None:
            org.created_by = acting_user_id
        if assign_admin:
            org.admin_user_id = acting_user_id
        session.add(org)
        await session.flush()
    except SQLAlchemyError as exc:
        await session.rollback()
        log.warning(
            "org.status_write_failed",
            org_id=str(organization_id),
            org_type=org_type.value,
            error=str(exc),
        )
        return _fail(ErrorKind.STORE_UNAVAILABLE, "Approval failed, please retry")

    # Audit record and first-admin link, same transaction.
    try:
        if assign_admin:
            await _link_admin(session, org, acting_user_id)
        await _record_history(session, org, target, acting_user_id, reason)
    except SQLAlchemyError as exc:
        rolled_back = True
        try:
            await session.rollback()
        except SQLAlchemyError:
            rolled_back = False
        log.error(
            "approval.partial_write",
            org_id=str(organization_id),
            org_type=org_type.value,
            new_status=target.value,
            changed_by=str(acting_user_id),
            rolled_back=rolled_back,
            error=str(exc),
        )
        return _fail(
            ErrorKind.CONFLICT_OR_PARTIAL_WRITE,
            "Status and audit trail could not be written together; manual follow-up required",
            organization_id=organization_id,
            organization_type=org_type.value,
            new_status=target.value,
            rolled_back=rolled_back,
        )

    log.info(
        "org.status_changed",
        org_id=str(org.id),
        org_type=org_type.value,
        previous_status=current.value,
        new_status=target.value,
        changed_by=str(acting_user_id),
        admin_assigned=assign_admin,
    )
    return ApprovalResult(organization=snapshot(org), admin_assigned=assign_admin)


async def _link_admin(
    session: AsyncSession, org: OrganizationBase, user_id: uuid.UUID
) -> None:
    existing = await session.get(OrgMembership, (user_id, org.id))
    if existing is not None:
        existing.role = MembershipRole.ADMIN.value
        session.add(existing)
    else:
        session.add(
            OrgMembership(
                user_id=user_id,
                organization_id=org.id,
                organization_type=org.organization_type.value,
                role=MembershipRole.ADMIN.value,
            )
        )
    await session.flush()


async def _record_history(
    session: AsyncSession,
    org: OrganizationBase,
    new_status: OrgStatus,
    changed_by: uuid.UUID,
    reason: Optional[str],
) -> ApprovalHistory:
    record = ApprovalHistory(
        organization_id=org.id,
        organization_type=org.organization_type.value,
        new_status=new_status.value,
        changed_by=changed_by,
        reason=reason,
    )
    session.add(record)
    await session.flush()
    return record


async def update_user_status(
    session: AsyncSession,
    user_id: uuid.UUID,
    new_status: UserStatus | str,
    acting_user_id: uuid.UUID,
    reason: Optional[str] = None,
) -> ApprovalResult:
    """Approve, suspend or reactivate a user account.

    Rejecting a pending user also detaches them from the organization they
    asked to join.
    """
    try:
        target = UserStatus(new_status)
    except ValueError:
        target = None
    if target not in (UserStatus.ACTIVE, UserStatus.SUSPENDED):
        return _fail(
            ErrorKind.VALIDATION_ERROR,
            f"Invalid status '{new_status}'; expected active or suspended",
            new_status=new_status,
        )

    try:
        user = await session.get(
            User, user_id, with_for_update=True, populate_existing=True
        )
    except SQLAlchemyError as exc:
        log.warning("user.status_read_failed", user_id=str(user_id), error=str(exc))
        return _fail(ErrorKind.STORE_UNAVAILABLE, "User store unavailable, please retry")
    if user is None:
        return _fail(ErrorKind.NOT_FOUND, "User not found", user_id=user_id)

    current = UserStatus(user.status)
    rejecting = current == UserStatus.PENDING and target == UserStatus.SUSPENDED

    try:
        user.status = target.value
        user.updated_at = utcnow()
        if rejecting:
            user.organization_id = None
            user.is_org_admin = False
        session.add(user)
        await session.flush()
    except SQLAlchemyError as exc:
        await session.rollback()
        log.warning("user.status_write_failed", user_id=str(user_id), error=str(exc))
        return _fail(ErrorKind.STORE_UNAVAILABLE, "Approval failed, please retry")

    try:
        session.add(
            UserStatusHistory(
                user_id=user.id,
                new_status=target.value,
                changed_by=acting_user_id,
                reason=reason.strip() if reason else None,
            )
        )
        await session.flush()
    except SQLAlchemyError as exc:
        rolled_back = True
        try:
            await session.rollback()
        except SQLAlchemyError:
            rolled_back = False
        log.error(
            "approval.partial_write",
            user_id=str(user_id),
            new_status=target.value,
            changed_by=str(acting_user_id),
            rolled_back=rolled_back,
            error=str(exc),
        )
        return _fail(
            ErrorKind.CONFLICT_OR_PARTIAL_WRITE,
            "Status and audit trail could not be written together; manual follow-up required",
            user_id=user_id,
            new_status=target.value,
            rolled_back=rolled_back,
        )

    log.info(
        "user.status_changed",
        user_id=str(user.id),
        previous_status=current.value,
        new_status=target.value,
        changed_by=str(acting_user_id),
    )
    return ApprovalResult(user=user)
