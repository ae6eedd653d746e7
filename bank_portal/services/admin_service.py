"""
Admin service - back-office user management, dashboard stats and
admin-authored email.

User management:
  Admins can create customers or other admins (each gets a profile), edit
  names, email, role and active flag, deactivate users (soft delete; rows
  are kept for the ledger and audit trail) and send a password-reset link.
  An admin cannot demote, deactivate or delete their own user.

Every change is written to the audit log.
"""

import uuid
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import BusinessRuleError, DuplicateEmailError, ResourceNotFoundError
from bank_portal.models.account import Account, AccountStatus
from bank_portal.models.audit import AuditAction
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.transaction import Transaction, TransactionStatus, TransactionType
from bank_portal.models.transfer import REVIEWABLE_STATUSES, Transfer, TransferStatus
from bank_portal.models.user import User, UserRole
from bank_portal.schemas.user import AdminUserCreateRequest, AdminUserUpdateRequest
from bank_portal.services import audit_service, auth_service, email_service

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def list_users(
    db: AsyncSession,
    role_filter: UserRole | None = None,
) -> list[dict]:
    query = (
        select(User, CustomerProfile)
        .outerjoin(CustomerProfile, CustomerProfile.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    if role_filter:
        query = query.where(User.role == role_filter)
    result = await db.execute(query)

    return [
        {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "is_active": user.is_active,
            "created_at": user.created_at,
            "first_name": profile.first_name if profile else None,
            "last_name": profile.last_name if profile else None,
            "kyc_status": profile.kyc_status.value if profile else None,
        }
        for user, profile in result.all()
    ]


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


async def _get_profile(db: AsyncSession, user_id: uuid.UUID) -> CustomerProfile | None:
    result = await db.execute(
        select(CustomerProfile).where(CustomerProfile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_user_detail(db: AsyncSession, user_id: uuid.UUID) -> dict:
    """The user, their profile and their accounts."""
    user = await _get_user(db, user_id)
    profile = await _get_profile(db, user.id)

    accounts: list[Account] = []
    if profile is not None:
        result = await db.execute(
            select(Account)
            .where(Account.customer_id == profile.id)
            .order_by(Account.created_at)
        )
        accounts = list(result.scalars().all())

    return {"user": user, "profile": profile, "accounts": accounts}


async def create_user(
    db: AsyncSession,
    admin: User,
    request: AdminUserCreateRequest,
    client: ClientInfo | None = None,
) -> User:
    user, _ = await auth_service.create_user(
        db,
        request.email,
        request.password,
        request.first_name,
        request.last_name,
        request.phone,
        role=request.role,
    )
    await audit_service.record(
        db,
        admin.id,
        AuditAction.USER_CREATED,
        target_user_id=user.id,
        details={"email": user.email, "role": user.role.value},
        client=client,
    )
    return user


async def update_user(
    db: AsyncSession,
    admin: User,
    user_id: uuid.UUID,
    request: AdminUserUpdateRequest,
    client: ClientInfo | None = None,
) -> User:
    """
    Raises:
        ResourceNotFoundError: No such user.
        BusinessRuleError: An admin demoting or deactivating themselves.
        DuplicateEmailError: The new email belongs to another user.
    """
    user = await _get_user(db, user_id)
    changes = request.model_dump(exclude_unset=True, exclude_none=True)

    if user.id == admin.id:
        if changes.get("role", UserRole.ADMIN) != UserRole.ADMIN:
            raise BusinessRuleError("You cannot remove your own admin role")
        if changes.get("is_active") is False:
            raise BusinessRuleError("You cannot deactivate your own user")

    if "email" in changes and changes["email"] != user.email:
        result = await db.execute(select(User.id).where(User.email == changes["email"]))
        if result.scalar_one_or_none() is not None:
            raise DuplicateEmailError(changes["email"])
        user.email = changes["email"]
    if "role" in changes:
        user.role = changes["role"]
    if "is_active" in changes:
        user.is_active = changes["is_active"]

    profile_fields = {k: v for k, v in changes.items() if k in ("first_name", "last_name", "phone")}
    if profile_fields:
        profile = await _get_profile(db, user.id)
        if profile is not None:
            for field, value in profile_fields.items():
                setattr(profile, field, value)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.USER_UPDATED,
        target_user_id=user.id,
        details={"fields": sorted(changes)},
        client=client,
    )
    return user


async def deactivate_user(
    db: AsyncSession,
    admin: User,
    user_id: uuid.UUID,
    client: ClientInfo | None = None,
) -> User:
    user = await _get_user(db, user_id)
    if user.id == admin.id:
        raise BusinessRuleError("You cannot delete your own user")

    user.is_active = False
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.USER_DEACTIVATED,
        target_user_id=user.id,
        details={"email": user.email},
        client=client,
    )
    return user


async def send_password_reset(
    db: AsyncSession,
    admin: User,
    user_id: uuid.UUID,
    client: ClientInfo | None = None,
) -> None:
    user = await _get_user(db, user_id)
    if not user.is_active:
        raise BusinessRuleError("Cannot reset the password of a deactivated user")

    await auth_service.send_password_reset(db, user)
    await audit_service.record(
        db,
        admin.id,
        AuditAction.PASSWORD_RESET_SENT,
        target_user_id=user.id,
        client=client,
    )


# ---------------------------------------------------------------------------
# Admin email
# ---------------------------------------------------------------------------

async def send_bulk_email(
    db: AsyncSession,
    admin: User,
    user_ids: list[uuid.UUID],
    subject: str,
    message: str,
    client: ClientInfo | None = None,
) -> dict:
    """Email each existing user in `user_ids`; returns requested and sent counts."""
    result = await db.execute(select(User).where(User.id.in_(user_ids)))
    users = list(result.scalars().all())

    sent_count = 0
    for user in users:
        if await email_service.send_custom_email(db, user, subject, message):
            sent_count += 1

    await audit_service.record(
        db,
        admin.id,
        AuditAction.EMAIL_SENT,
        details={
            "subject": subject,
            "recipients": [str(u.id) for u in users],
            "sent_count": sent_count,
        },
        client=client,
    )
    logger.info("admin_bulk_email", recipients=len(users), sent_count=sent_count)
    return {"requested": len(user_ids), "sent_count": sent_count}


# ---------------------------------------------------------------------------
# Dashboard stats
# ---------------------------------------------------------------------------

async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


async def get_stats(db: AsyncSession) -> dict:
    now = datetime.now(timezone.utc)
    day_ago = now - timedelta(hours=24)
    month_ago = now - timedelta(days=30)

    role_counts = dict(
        (await db.execute(select(User.role, func.count(User.id)).group_by(User.role))).all()
    )
    status_counts = dict(
        (await db.execute(select(Account.status, func.count(Account.id)).group_by(Account.status))).all()
    )
    transfer_counts = dict(
        (await db.execute(select(Transfer.status, func.count(Transfer.id)).group_by(Transfer.status))).all()
    )

    return {
        "users": {
            "total": sum(role_counts.values()),
            "admins": role_counts.get(UserRole.ADMIN, 0),
            "customers": role_counts.get(UserRole.CUSTOMER, 0),
            "new_last_24h": await _count(
                db, select(func.count(User.id)).where(User.created_at >= day_ago)
            ),
        },
        "accounts": {
            "total": sum(status_counts.values()),
            "active": status_counts.get(AccountStatus.ACTIVE, 0),
            "frozen": status_counts.get(AccountStatus.FROZEN, 0),
            "closed": status_counts.get(AccountStatus.CLOSED, 0),
            "total_active_balance_cents": await _count(
                db,
                select(func.coalesce(func.sum(Account.cached_balance_cents), 0))
                .where(Account.status == AccountStatus.ACTIVE),
            ),
        },
        "transfers": {
            "pending_review": sum(transfer_counts.get(s, 0) for s in REVIEWABLE_STATUSES),
            "completed": transfer_counts.get(TransferStatus.COMPLETED, 0),
            "rejected": transfer_counts.get(TransferStatus.REJECTED, 0),
        },
        "transactions": {
            "count_last_24h": await _count(
                db, select(func.count(Transaction.id)).where(Transaction.created_at >= day_ago)
            ),
            "debit_volume_30d_cents": await _count(
                db,
                select(func.coalesce(func.sum(Transaction.amount_cents), 0))
                .where(Transaction.type == TransactionType.DEBIT)
                .where(Transaction.status == TransactionStatus.APPROVED)
                .where(Transaction.created_at >= month_ago),
            ),
        },
        "generated_at": now,
    }
