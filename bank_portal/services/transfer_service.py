"""
Transfer service - submission, admin review, and status polling.

Submission (customer):
  1. The source account must belong to the customer and be active.
  2. The destination is resolved: an internal account (by id, or by an
     account number carrying our routing number) or an external account
     (other routing number, holder name required).
  3. Fee and tax are computed:
       fee = 0.1% of the amount when the amount is over $1,000, else 0
       tax = 0.1% of the amount, always
     both rounded half-up to whole cents.
  4. The balance must cover amount + fee + tax.
  5. The transfer is stored as VERIFICATION_REQUIRED. No money moves yet.

Approval (admin):
  Only PENDING, PROCESSING or VERIFICATION_REQUIRED transfers can be
  reviewed. The source status and balance are checked again because they
  may have changed since submission. If the check fails the transfer is
  marked FAILED with a reason and the error is returned; the session still
  commits that status change. Otherwise the source receives a debit row
  for the amount plus fee and tax rows, an internal destination receives a
  credit row, and the transfer becomes COMPLETED.

Rejection (admin):
  Same reviewable states. Stores the reason; no balance changes.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

import structlog
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.config import settings
from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import (
    AccountNotActiveError,
    AccountNotFoundError,
    BusinessRuleError,
    InsufficientFundsError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.account import Account, AccountStatus
from bank_portal.models.audit import AuditAction
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.email import EmailEventType
from bank_portal.models.notification import NotificationType
from bank_portal.models.transaction import TransactionType
from bank_portal.models.transfer import REVIEWABLE_STATUSES, Transfer, TransferStatus
from bank_portal.models.user import User
from bank_portal.schemas.transfer import TransferCreateRequest
from bank_portal.services import (
    account_service,
    audit_service,
    email_service,
    notification_service,
    transaction_service,
)

logger = structlog.get_logger()


def _percent_of(amount_cents: int, rate: float) -> int:
    return int(
        (Decimal(amount_cents) * Decimal(str(rate))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )


def calculate_charges(amount_cents: int) -> tuple[int, int]:
    """Return (fee_cents, tax_cents) for a transfer amount."""
    fee = (
        _percent_of(amount_cents, settings.TRANSFER_FEE_RATE)
        if amount_cents > settings.TRANSFER_FEE_THRESHOLD_CENTS
        else 0
    )
    tax = _percent_of(amount_cents, settings.TRANSFER_TAX_RATE)
    return fee, tax


async def _resolve_destination(
    db: AsyncSession,
    request: TransferCreateRequest,
) -> tuple[Account | None, str, str, str | None, str | None]:
    """
    Work out where the money goes.

    Returns (internal_account_or_None, account_number, routing_number,
    bank_name, holder_name_from_profile).
    """
    internal: Account | None = None

    if request.to_account_id is not None:
        internal = await db.get(Account, request.to_account_id)
        if internal is None:
            raise AccountNotFoundError(request.to_account_id)
    elif request.to_routing_number in (None, settings.ROUTING_NUMBER):
        result = await db.execute(
            select(Account).where(Account.account_number == request.to_account_number)
        )
        internal = result.scalar_one_or_none()
        if internal is None:
            raise AccountNotFoundError(request.to_account_number)

    if internal is None:
        return (
            None,
            request.to_account_number,
            request.to_routing_number,
            request.to_bank_name,
            None,
        )

    profile = await db.get(CustomerProfile, internal.customer_id)
    return (
        internal,
        internal.account_number,
        internal.routing_number,
        settings.BANK_NAME,
        f"{profile.first_name} {profile.last_name}",
    )


async def create_transfer(
    db: AsyncSession,
    customer: CustomerProfile,
    request: TransferCreateRequest,
) -> Transfer:
    """
    Submit a transfer for admin review.

    Raises:
        AccountNotFoundError: Source or internal destination doesn't exist.
        UnauthorizedAccessError: Source belongs to someone else.
        AccountNotActiveError: Source or internal destination isn't active.
        BusinessRuleError: Same source and destination, or an external
            transfer without a holder name.
        InsufficientFundsError: Balance doesn't cover amount + fee + tax.
    """
    source = await account_service.get_account(db, request.from_account_id, customer.id)
    transaction_service.ensure_active(source)

    destination, to_number, to_routing, to_bank, profile_name = await _resolve_destination(db, request)

    if destination is not None:
        if destination.id == source.id:
            raise BusinessRuleError("Cannot transfer to the same account")
        if destination.status != AccountStatus.ACTIVE:
            raise AccountNotActiveError(destination.id, destination.status.value)

    holder_name = request.to_account_holder_name or profile_name
    if not holder_name:
        raise BusinessRuleError("to_account_holder_name is required for external transfers")

    fee_cents, tax_cents = calculate_charges(request.amount_cents)
    total = request.amount_cents + fee_cents + tax_cents
    if source.cached_balance_cents < total:
        raise InsufficientFundsError(
            account_id=source.id,
            requested_cents=total,
            available_cents=source.cached_balance_cents,
        )

    transfer = Transfer(
        from_account_id=source.id,
        to_account_id=destination.id if destination is not None else None,
        to_account_number=to_number,
        to_routing_number=to_routing,
        to_bank_name=to_bank,
        to_account_holder_name=holder_name,
        recipient_email=request.recipient_email,
        recipient_phone=request.recipient_phone,
        amount_cents=request.amount_cents,
        fee_cents=fee_cents,
        tax_cents=tax_cents,
        description=request.description,
        status=TransferStatus.VERIFICATION_REQUIRED,
    )
    db.add(transfer)
    await db.flush()

    logger.info(
        "transfer_submitted",
        transfer_id=str(transfer.id),
        from_account_id=str(source.id),
        internal=destination is not None,
        amount_cents=transfer.amount_cents,
        fee_cents=fee_cents,
        tax_cents=tax_cents,
    )

    user = await db.get(User, customer.user_id)
    await _notify_owner(db, user, customer.first_name, transfer)
    return transfer


async def _notify_owner(
    db: AsyncSession,
    user: User,
    first_name: str,
    transfer: Transfer,
) -> None:
    status = transfer.status.value
    await email_service.send_transfer_status_email(
        db,
        user,
        first_name,
        transfer.id,
        transfer.amount_cents,
        transfer.to_account_holder_name,
        status,
        transfer.rejection_reason,
    )
    titles = {
        TransferStatus.VERIFICATION_REQUIRED: "Transfer submitted for review",
        TransferStatus.COMPLETED: "Transfer completed",
        TransferStatus.REJECTED: "Transfer rejected",
        TransferStatus.FAILED: "Transfer failed",
    }
    message = (
        f"{email_service.format_cents(transfer.amount_cents)} to "
        f"{transfer.to_account_holder_name}"
    )
    if transfer.rejection_reason:
        message += f". Reason: {transfer.rejection_reason}"
    await notification_service.notify(
        db,
        user.id,
        NotificationType.TRANSFER,
        titles.get(transfer.status, "Transfer updated"),
        message,
        metadata={"transfer_id": str(transfer.id), "status": status},
        event_type=EmailEventType.TRANSFER_STATUS,
    )


def _customer_account_ids(customer_id: uuid.UUID):
    return select(Account.id).where(Account.customer_id == customer_id)


async def list_transfers(
    db: AsyncSession,
    customer_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
) -> list[Transfer]:
    """Transfers sent from or received into the customer's accounts, newest first."""
    owned = _customer_account_ids(customer_id)
    result = await db.execute(
        select(Transfer)
        .where(or_(Transfer.from_account_id.in_(owned), Transfer.to_account_id.in_(owned)))
        .order_by(Transfer.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def get_transfer(
    db: AsyncSession,
    transfer_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> Transfer:
    """
    Raises:
        ResourceNotFoundError: No such transfer.
        UnauthorizedAccessError: Neither side of the transfer is the customer's.
    """
    transfer = await db.get(Transfer, transfer_id)
    if transfer is None:
        raise ResourceNotFoundError("Transfer", transfer_id)

    result = await db.execute(
        select(Account.id)
        .where(Account.customer_id == customer_id)
        .where(Account.id.in_([transfer.from_account_id, transfer.to_account_id]))
    )
    if result.first() is None:
        raise UnauthorizedAccessError("You do not have access to this transfer")
    return transfer


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------

async def admin_list_pending(db: AsyncSession) -> list[Transfer]:
    """Transfers waiting for review, oldest first."""
    result = await db.execute(
        select(Transfer)
        .where(Transfer.status.in_(REVIEWABLE_STATUSES))
        .order_by(Transfer.created_at.asc())
    )
    return list(result.scalars().all())


async def admin_list_transfers(
    db: AsyncSession,
    status_filter: TransferStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transfer]:
    query = (
        select(Transfer)
        .order_by(Transfer.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if status_filter:
        query = query.where(Transfer.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


async def _get_reviewable(db: AsyncSession, transfer_id: uuid.UUID, target: TransferStatus) -> Transfer:
    transfer = await db.get(Transfer, transfer_id)
    if transfer is None:
        raise ResourceNotFoundError("Transfer", transfer_id)
    if transfer.status not in REVIEWABLE_STATUSES:
        raise InvalidStatusTransitionError("Transfer", transfer.status.value, target.value)
    return transfer


async def _fail(
    db: AsyncSession,
    transfer: Transfer,
    reason: str,
    owner: User,
    owner_profile: CustomerProfile,
) -> None:
    transfer.status = TransferStatus.FAILED
    transfer.rejection_reason = reason
    await db.flush()
    logger.warning("transfer_failed", transfer_id=str(transfer.id), reason=reason)
    await _notify_owner(db, owner, owner_profile.first_name, transfer)


async def admin_approve(
    db: AsyncSession,
    admin: User,
    transfer_id: uuid.UUID,
    client: ClientInfo | None = None,
) -> Transfer:
    """
    [ADMIN ONLY] Approve a transfer and move the money.

    Raises:
        ResourceNotFoundError, InvalidStatusTransitionError
        AccountNotActiveError / InsufficientFundsError: the transfer is
            marked FAILED before the error propagates.
    """
    transfer = await _get_reviewable(db, transfer_id, TransferStatus.COMPLETED)

    # Lock in UUID order to avoid deadlocks between concurrent approvals
    account_ids = sorted(
        {transfer.from_account_id, transfer.to_account_id} - {None},
        key=str,
    )
    locked = {
        account_id: await transaction_service.lock_account(db, account_id)
        for account_id in account_ids
    }
    source = locked[transfer.from_account_id]
    destination = locked.get(transfer.to_account_id) if transfer.to_account_id else None

    owner, owner_profile = await account_service.get_account_owner(db, source)

    if source.status != AccountStatus.ACTIVE:
        await _fail(db, transfer, f"Source account is {source.status.value}", owner, owner_profile)
        raise AccountNotActiveError(source.id, source.status.value)

    if destination is not None and destination.status != AccountStatus.ACTIVE:
        await _fail(db, transfer, f"Destination account is {destination.status.value}", owner, owner_profile)
        raise AccountNotActiveError(destination.id, destination.status.value)

    total = transfer.total_debit_cents
    if source.cached_balance_cents < total:
        available = source.cached_balance_cents
        await _fail(db, transfer, "Insufficient funds at approval", owner, owner_profile)
        raise InsufficientFundsError(
            account_id=source.id,
            requested_cents=total,
            available_cents=available,
        )

    recipient = transfer.to_account_holder_name
    await transaction_service.debit_account(
        db,
        source,
        transfer.amount_cents,
        description=transfer.description or f"Transfer to {recipient}",
        transfer_id=transfer.id,
    )
    if transfer.fee_cents > 0:
        await transaction_service.debit_account(
            db,
            source,
            transfer.fee_cents,
            description="Transfer fee",
            txn_type=TransactionType.FEE,
            transfer_id=transfer.id,
        )
    if transfer.tax_cents > 0:
        await transaction_service.debit_account(
            db,
            source,
            transfer.tax_cents,
            description="Transfer tax",
            txn_type=TransactionType.TAX,
            transfer_id=transfer.id,
        )

    if destination is not None:
        sender_name = f"{owner_profile.first_name} {owner_profile.last_name}"
        await transaction_service.credit_account(
            db,
            destination,
            transfer.amount_cents,
            description=transfer.description or f"Transfer from {sender_name}",
            transfer_id=transfer.id,
        )

    now = datetime.now(timezone.utc)
    transfer.status = TransferStatus.COMPLETED
    transfer.approved_by = admin.id
    transfer.approved_at = now
    transfer.completed_at = now
    await db.flush()

    logger.info(
        "transfer_approved",
        transfer_id=str(transfer.id),
        admin_id=str(admin.id),
        total_debit_cents=total,
    )

    await audit_service.record(
        db,
        admin.id,
        AuditAction.TRANSFER_APPROVED,
        target_user_id=owner.id,
        details={
            "transfer_id": transfer.id,
            "amount_cents": transfer.amount_cents,
            "fee_cents": transfer.fee_cents,
            "tax_cents": transfer.tax_cents,
        },
        client=client,
    )
    await _notify_owner(db, owner, owner_profile.first_name, transfer)

    if destination is not None:
        recipient_user, _ = await account_service.get_account_owner(db, destination)
        if recipient_user.id != owner.id:
            await notification_service.notify(
                db,
                recipient_user.id,
                NotificationType.TRANSACTION,
                "Money received",
                f"{email_service.format_cents(transfer.amount_cents)} arrived in your account "
                f"ending in {destination.account_number[-4:]}.",
                metadata={"transfer_id": str(transfer.id)},
            )

    return transfer


async def admin_reject(
    db: AsyncSession,
    admin: User,
    transfer_id: uuid.UUID,
    reason: str,
    client: ClientInfo | None = None,
) -> Transfer:
    """[ADMIN ONLY] Reject a transfer. No money moves."""
    transfer = await _get_reviewable(db, transfer_id, TransferStatus.REJECTED)

    transfer.status = TransferStatus.REJECTED
    transfer.rejection_reason = reason
    transfer.approved_by = admin.id
    await db.flush()

    logger.info("transfer_rejected", transfer_id=str(transfer.id), admin_id=str(admin.id))

    source = await db.get(Account, transfer.from_account_id)
    owner, owner_profile = await account_service.get_account_owner(db, source)
    await audit_service.record(
        db,
        admin.id,
        AuditAction.TRANSFER_REJECTED,
        target_user_id=owner.id,
        details={"transfer_id": transfer.id, "reason": reason},
        client=client,
    )
    await _notify_owner(db, owner, owner_profile.first_name, transfer)
    return transfer
