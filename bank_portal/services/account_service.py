"""
Account service - business logic for bank account operations.

This module handles:
  - Account creation (unique account number, welcome email)
  - Account retrieval, scoped to a customer
  - Balance verification (cached vs. computed from the ledger)
  - Recipient lookup by account number

Ownership enforcement:
  Customer functions take a `customer_id`, always the authenticated
  customer's profile id supplied by the dependency layer. Another
  customer's account yields UnauthorizedAccessError (403); a missing one
  AccountNotFoundError (404).

Admin functions:
  Functions prefixed with `admin_` skip ownership scoping. Besides reads
  they cover the back-office operations on accounts: manual credits and
  debits and status changes (freeze, unfreeze, close). Each of these writes
  an audit row and tells the customer by email and in-app notification.
"""

import random
import string
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import (
    AccountNotFoundError,
    InvalidStatusTransitionError,
    UnauthorizedAccessError,
)
from bank_portal.models.account import Account, AccountStatus, AccountType
from bank_portal.models.audit import AuditAction
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.email import EmailEventType
from bank_portal.models.notification import NotificationType
from bank_portal.models.transaction import Transaction
from bank_portal.models.user import User
from bank_portal.services import audit_service, email_service, notification_service, transaction_service

logger = structlog.get_logger()

_STATUS_AUDIT_ACTIONS = {
    AccountStatus.FROZEN: AuditAction.ACCOUNT_FROZEN,
    AccountStatus.CLOSED: AuditAction.ACCOUNT_CLOSED,
    AccountStatus.ACTIVE: AuditAction.ACCOUNT_UNFROZEN,
}


def _generate_account_number() -> str:
    """Random 10-digit account number."""
    return "".join(random.choices(string.digits, k=10))


async def get_account_owner(
    db: AsyncSession,
    account: Account,
) -> tuple[User, CustomerProfile]:
    """The user and profile that own an account."""
    result = await db.execute(
        select(User, CustomerProfile)
        .join(CustomerProfile, CustomerProfile.user_id == User.id)
        .where(CustomerProfile.id == account.customer_id)
    )
    user, profile = result.one()
    return user, profile


async def create_account(
    db: AsyncSession,
    customer: CustomerProfile,
    account_type: AccountType = AccountType.CHECKING,
) -> Account:
    """
    Open a new account for a customer with a zero balance.

    Generates a unique account number, then sends the welcome email.
    """
    for _ in range(10):
        account_number = _generate_account_number()
        existing = await db.execute(
            select(Account).where(Account.account_number == account_number)
        )
        if existing.scalar_one_or_none() is None:
            break
    else:
        raise RuntimeError("Failed to generate a unique account number")

    account = Account(
        customer_id=customer.id,
        account_type=account_type,
        account_number=account_number,
    )
    db.add(account)
    await db.flush()

    logger.info(
        "account_created",
        account_id=str(account.id),
        customer_id=str(customer.id),
        account_type=account_type.value,
    )

    user = await db.get(User, customer.user_id)
    await email_service.send_account_created_email(
        db, user, customer.first_name, account.account_number, account_type.value
    )
    await notification_service.notify(
        db,
        user.id,
        NotificationType.ACCOUNT_UPDATE,
        "Account opened",
        f"Your {account_type.value} account ending in {account_number[-4:]} is ready.",
        metadata={"account_id": str(account.id)},
        event_type=EmailEventType.ACCOUNT_CREATED,
    )
    return account


async def get_accounts(
    db: AsyncSession,
    customer_id: uuid.UUID,
) -> list[Account]:
    """List all accounts belonging to a customer."""
    result = await db.execute(
        select(Account)
        .where(Account.customer_id == customer_id)
        .order_by(Account.created_at)
    )
    return list(result.scalars().all())


async def get_account(
    db: AsyncSession,
    account_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> Account:
    """
    Get a single account, verifying ownership.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
        UnauthorizedAccessError: If the account belongs to someone else.
    """
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()

    if account is None:
        raise AccountNotFoundError(account_id)

    if account.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this account")

    return account


async def _balance_report(db: AsyncSession, account: Account) -> dict:
    computed_balance_cents = await transaction_service.compute_balance(db, account.id)
    return {
        "account_id": account.id,
        "cached_balance_cents": account.cached_balance_cents,
        "computed_balance_cents": computed_balance_cents,
        "match": account.cached_balance_cents == computed_balance_cents,
        "currency": account.currency,
    }


async def get_balance(
    db: AsyncSession,
    account_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> dict:
    """
    Get the balance - both cached and recomputed from the ledger.

    Returns:
        Dict with cached_balance_cents, computed_balance_cents, match, currency.
    """
    account = await get_account(db, account_id, customer_id)
    return await _balance_report(db, account)


async def lookup_account(db: AsyncSession, account_number: str) -> dict:
    """
    Find an account at this bank by number, for confirming a transfer
    recipient. Closed accounts are reported as not found.
    """
    result = await db.execute(
        select(Account, CustomerProfile)
        .join(CustomerProfile, CustomerProfile.id == Account.customer_id)
        .where(Account.account_number == account_number)
        .where(Account.status != AccountStatus.CLOSED)
    )
    row = result.one_or_none()
    if row is None:
        raise AccountNotFoundError(account_number)

    account, profile = row
    return {
        "id": account.id,
        "account_type": account.account_type,
        "account_number": account.account_number,
        "account_holder_name": f"{profile.first_name} {profile.last_name}",
    }


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def admin_get_all_accounts(
    db: AsyncSession,
    status_filter: AccountStatus | None = None,
) -> list[Account]:
    """[ADMIN ONLY] List all accounts, newest first."""
    query = select(Account).order_by(Account.created_at.desc())
    if status_filter:
        query = query.where(Account.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


async def admin_get_account(
    db: AsyncSession,
    account_id: uuid.UUID,
) -> Account:
    """
    [ADMIN ONLY] Get any account by ID without ownership check.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await db.get(Account, account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


async def admin_get_balance(
    db: AsyncSession,
    account_id: uuid.UUID,
) -> dict:
    """[ADMIN ONLY] Get any account's balance without ownership check."""
    account = await admin_get_account(db, account_id)
    return await _balance_report(db, account)


async def admin_adjust_balance(
    db: AsyncSession,
    admin: User,
    account_id: uuid.UUID,
    direction: str,
    amount_cents: int,
    description: str,
    client: ClientInfo | None = None,
) -> tuple[Account, Transaction]:
    """
    [ADMIN ONLY] Manually credit or debit an account.

    Args:
        direction: "credit" or "debit".

    Raises:
        AccountNotFoundError, AccountNotActiveError, InsufficientFundsError
    """
    account = await transaction_service.lock_account(db, account_id)

    if direction == "credit":
        txn = await transaction_service.credit_account(db, account, amount_cents, description)
        action = AuditAction.BALANCE_CREDITED
    else:
        txn = await transaction_service.debit_account(db, account, amount_cents, description)
        action = AuditAction.BALANCE_DEBITED

    user, profile = await get_account_owner(db, account)
    await audit_service.record(
        db,
        admin.id,
        action,
        target_user_id=user.id,
        details={
            "account_id": account.id,
            "amount_cents": amount_cents,
            "description": description,
            "balance_after_cents": account.cached_balance_cents,
        },
        client=client,
    )
    await email_service.send_balance_change_email(
        db,
        user,
        profile.first_name,
        account.account_number,
        direction,
        amount_cents,
        account.cached_balance_cents,
        description,
    )
    await notification_service.notify(
        db,
        user.id,
        NotificationType.TRANSACTION,
        "Account credited" if direction == "credit" else "Account debited",
        f"{email_service.format_cents(amount_cents)}: {description}",
        metadata={"account_id": str(account.id), "transaction_id": str(txn.id)},
        event_type=EmailEventType.BALANCE_CHANGE,
    )
    return account, txn


async def admin_change_status(
    db: AsyncSession,
    admin: User,
    account_id: uuid.UUID,
    new_status: AccountStatus,
    reason: str,
    client: ClientInfo | None = None,
) -> Account:
    """
    [ADMIN ONLY] Freeze, unfreeze or close an account.

    A closed account stays closed, and setting the current status again is
    rejected.

    Raises:
        AccountNotFoundError, InvalidStatusTransitionError
    """
    account = await transaction_service.lock_account(db, account_id)
    old_status = account.status

    if old_status == AccountStatus.CLOSED or old_status == new_status:
        raise InvalidStatusTransitionError("Account", old_status.value, new_status.value)

    account.status = new_status
    await db.flush()

    user, profile = await get_account_owner(db, account)
    await audit_service.record(
        db,
        admin.id,
        _STATUS_AUDIT_ACTIONS[new_status],
        target_user_id=user.id,
        details={
            "account_id": account.id,
            "previous_status": old_status.value,
            "new_status": new_status.value,
            "reason": reason,
        },
        client=client,
    )
    await email_service.send_account_status_email(
        db, user, profile.first_name, account.account_number, new_status.value, reason
    )
    await notification_service.notify(
        db,
        user.id,
        NotificationType.ACCOUNT_UPDATE,
        f"Account {new_status.value}",
        f"Your account ending in {account.account_number[-4:]} is now {new_status.value}. "
        f"Reason: {reason}",
        metadata={"account_id": str(account.id)},
        event_type=EmailEventType.ACCOUNT_STATUS,
    )
    return account
