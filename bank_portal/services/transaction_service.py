"""
Transaction service - the ledger primitives every money movement goes through.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It handles:
  - Crediting and debiting a single account (credit_account / debit_account)
  - Balance enforcement (no negative balances, no movement on frozen or
    closed accounts)
  - The declined-attempt audit trail
  - Ledger queries for customers and admins

Atomicity:
  Every balance change and its ledger row are written in the SAME database
  transaction (the request's session). Callers that write several rows
  (a transfer approval writes debit, fee, tax and an incoming credit) get
  all-or-nothing behavior from the session: any unexpected error rolls the
  whole request back.

Row locking:
  lock_account() selects with FOR UPDATE. SQLite ignores it and relies on
  its serialized writes; on PostgreSQL it prevents two requests from
  reading the same balance and both spending it. Transfer approval locks
  its two accounts in UUID order so concurrent approvals can't deadlock.

Admin read-only functions:
  Functions prefixed with `admin_` read any account's ledger without
  ownership scoping. Only admin routes call them.
"""

import uuid

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.exceptions import (
    AccountNotActiveError,
    AccountNotFoundError,
    InsufficientFundsError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.account import Account, AccountStatus
from bank_portal.models.transaction import (
    OUTFLOW_TYPES,
    Transaction,
    TransactionStatus,
    TransactionType,
)

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Ledger primitives
# ---------------------------------------------------------------------------

async def lock_account(db: AsyncSession, account_id: uuid.UUID) -> Account:
    """Load an account row for update. Raises AccountNotFoundError."""
    result = await db.execute(
        select(Account)
        .where(Account.id == account_id)
        .with_for_update()  # No-op on SQLite, locks row on PostgreSQL
    )
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


def ensure_active(account: Account) -> None:
    """Raise AccountNotActiveError unless the account can move money."""
    if account.status != AccountStatus.ACTIVE:
        raise AccountNotActiveError(account.id, account.status.value)


async def credit_account(
    db: AsyncSession,
    account: Account,
    amount_cents: int,
    description: str | None = None,
    transfer_id: uuid.UUID | None = None,
) -> Transaction:
    """
    Add money to an account and record the CREDIT row.

    The caller should have loaded `account` with lock_account().

    Raises:
        AccountNotActiveError: If the account is frozen or closed.
    """
    ensure_active(account)

    account.cached_balance_cents += amount_cents
    txn = Transaction(
        account_id=account.id,
        type=TransactionType.CREDIT,
        amount_cents=amount_cents,
        balance_after_cents=account.cached_balance_cents,
        status=TransactionStatus.APPROVED,
        description=description,
        transfer_id=transfer_id,
    )
    db.add(txn)
    await db.flush()
    return txn


async def debit_account(
    db: AsyncSession,
    account: Account,
    amount_cents: int,
    description: str | None = None,
    txn_type: TransactionType = TransactionType.DEBIT,
    transfer_id: uuid.UUID | None = None,
    card_id: uuid.UUID | None = None,
    record_declined: bool = False,
) -> Transaction:
    """
    Take money out of an account and record the row (DEBIT, FEE or TAX).

    If the balance is too low and `record_declined` is set, a DECLINED row
    is written first so the attempt stays visible in the ledger. The
    session dependency commits it even though the request fails.

    Raises:
        AccountNotActiveError: If the account is frozen or closed.
        InsufficientFundsError: If the debit would make the balance negative.
    """
    ensure_active(account)

    if account.cached_balance_cents < amount_cents:
        if record_declined:
            db.add(
                Transaction(
                    account_id=account.id,
                    type=txn_type,
                    amount_cents=amount_cents,
                    balance_after_cents=account.cached_balance_cents,
                    status=TransactionStatus.DECLINED,
                    description=description,
                    card_id=card_id,
                )
            )
            await db.flush()
        logger.info(
            "debit_declined",
            account_id=str(account.id),
            amount_cents=amount_cents,
            available_cents=account.cached_balance_cents,
        )
        raise InsufficientFundsError(
            account_id=account.id,
            requested_cents=amount_cents,
            available_cents=account.cached_balance_cents,
        )

    account.cached_balance_cents -= amount_cents
    txn = Transaction(
        account_id=account.id,
        type=txn_type,
        amount_cents=amount_cents,
        balance_after_cents=account.cached_balance_cents,
        status=TransactionStatus.APPROVED,
        description=description,
        transfer_id=transfer_id,
        card_id=card_id,
    )
    db.add(txn)
    await db.flush()
    return txn


async def compute_balance(db: AsyncSession, account_id: uuid.UUID) -> int:
    """
    Recompute an account's balance from its approved ledger rows.

    This is the integrity-check counterpart to cached_balance_cents.
    """
    credits = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount_cents), 0))
        .where(Transaction.account_id == account_id)
        .where(Transaction.status == TransactionStatus.APPROVED)
        .where(Transaction.type == TransactionType.CREDIT)
    )
    outflows = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount_cents), 0))
        .where(Transaction.account_id == account_id)
        .where(Transaction.status == TransactionStatus.APPROVED)
        .where(Transaction.type.in_(OUTFLOW_TYPES))
    )
    return credits.scalar() - outflows.scalar()


# ---------------------------------------------------------------------------
# Customer queries
# ---------------------------------------------------------------------------

async def _get_owned_account(
    db: AsyncSession,
    account_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> Account:
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError(account_id)
    if account.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this account")
    return account


async def get_customer_transactions(
    db: AsyncSession,
    customer_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    """
    List ledger rows across all of a customer's accounts, newest first.

    Each row carries its account number so a combined history can show
    which account it belongs to.
    """
    result = await db.execute(
        select(Transaction, Account.account_number)
        .join(Account, Account.id == Transaction.account_id)
        .where(Account.customer_id == customer_id)
        .order_by(Transaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    rows = []
    for txn, account_number in result.all():
        rows.append(
            {
                "id": txn.id,
                "account_id": txn.account_id,
                "account_number": account_number,
                "type": txn.type,
                "amount_cents": txn.amount_cents,
                "balance_after_cents": txn.balance_after_cents,
                "status": txn.status,
                "description": txn.description,
                "transfer_id": txn.transfer_id,
                "card_id": txn.card_id,
                "created_at": txn.created_at,
            }
        )
    return rows


async def get_account_transactions(
    db: AsyncSession,
    account_id: uuid.UUID,
    customer_id: uuid.UUID,
    type_filter: TransactionType | None = None,
    status_filter: TransactionStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """List one owned account's ledger rows, newest first, with optional filters."""
    await _get_owned_account(db, account_id, customer_id)
    return await _query_account_transactions(
        db, account_id, type_filter, status_filter, limit, offset
    )


async def get_transaction(
    db: AsyncSession,
    account_id: uuid.UUID,
    transaction_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> Transaction:
    await _get_owned_account(db, account_id, customer_id)

    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id)
        .where(Transaction.account_id == account_id)
    )
    txn = result.scalar_one_or_none()
    if txn is None:
        raise ResourceNotFoundError("Transaction", transaction_id)
    return txn


async def _query_account_transactions(
    db: AsyncSession,
    account_id: uuid.UUID,
    type_filter: TransactionType | None,
    status_filter: TransactionStatus | None,
    limit: int,
    offset: int,
) -> list[Transaction]:
    query = (
        select(Transaction)
        .where(Transaction.account_id == account_id)
        .order_by(Transaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if type_filter:
        query = query.where(Transaction.type == type_filter)
    if status_filter:
        query = query.where(Transaction.status == status_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Admin read-only functions
# ---------------------------------------------------------------------------

async def admin_get_all_transactions(
    db: AsyncSession,
    status_filter: TransactionStatus | None = None,
    type_filter: TransactionType | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """[ADMIN ONLY] List every ledger row in the system, newest first."""
    query = (
        select(Transaction)
        .order_by(Transaction.created_at.desc())
        .limit(limit)
        .offset(offset)
    )

    if status_filter:
        query = query.where(Transaction.status == status_filter)
    if type_filter:
        query = query.where(Transaction.type == type_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def admin_get_account_transactions(
    db: AsyncSession,
    account_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """[ADMIN ONLY] List any account's ledger rows without ownership check."""
    account = await db.get(Account, account_id)
    if account is None:
        raise AccountNotFoundError(account_id)

    return await _query_account_transactions(db, account_id, None, None, limit, offset)


async def admin_get_transaction(
    db: AsyncSession,
    transaction_id: uuid.UUID,
) -> Transaction:
    """[ADMIN ONLY] Get any single ledger row by ID."""
    txn = await db.get(Transaction, transaction_id)
    if txn is None:
        raise ResourceNotFoundError("Transaction", transaction_id)
    return txn
