"""
Statement service - monthly account statements as JSON or CSV.

A statement for an account and month is built by:
  1. Computing the opening balance from every approved ledger row before
     the month (credits minus debits, fees and taxes)
  2. Loading the month's rows in chronological order
  3. Totalling the month's approved credits and outflows
  4. Closing balance = opening + credits - outflows

Declined rows are listed (they are part of the account's history) but
never counted in the totals.

Month boundaries are computed in UTC.
"""

import csv
import io
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.models.transaction import (
    OUTFLOW_TYPES,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from bank_portal.services import account_service

CSV_HEADER = ["Date", "Type", "Amount", "Description", "Balance", "Status"]


async def _sum_before(
    db: AsyncSession,
    account_id: uuid.UUID,
    types: tuple[TransactionType, ...],
    before: datetime,
) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount_cents), 0))
        .where(
            and_(
                Transaction.account_id == account_id,
                Transaction.status == TransactionStatus.APPROVED,
                Transaction.type.in_(types),
                Transaction.created_at < before,
            )
        )
    )
    return result.scalar()


async def generate_statement(
    db: AsyncSession,
    account_id: uuid.UUID,
    customer_id: uuid.UUID,
    year: int,
    month: int,
) -> dict:
    """
    Generate a monthly statement for an account.

    Returns:
        Dictionary matching StatementResponse schema.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
        UnauthorizedAccessError: If the account belongs to someone else.
    """
    account = await account_service.get_account(db, account_id, customer_id)

    month_start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        month_end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        month_end = datetime(year, month + 1, 1, tzinfo=timezone.utc)

    pre_credits = await _sum_before(db, account_id, (TransactionType.CREDIT,), month_start)
    pre_outflows = await _sum_before(db, account_id, OUTFLOW_TYPES, month_start)
    opening_balance = pre_credits - pre_outflows

    month_txns_result = await db.execute(
        select(Transaction)
        .where(
            and_(
                Transaction.account_id == account_id,
                Transaction.created_at >= month_start,
                Transaction.created_at < month_end,
            )
        )
        .order_by(Transaction.created_at.asc())
    )
    transactions = list(month_txns_result.scalars().all())

    approved = [t for t in transactions if t.status == TransactionStatus.APPROVED]
    total_credits = sum(t.amount_cents for t in approved if t.type == TransactionType.CREDIT)
    total_debits = sum(t.amount_cents for t in approved if t.type in OUTFLOW_TYPES)

    return {
        "account_id": account_id,
        "account_number": account.account_number,
        "year": year,
        "month": month,
        "opening_balance_cents": opening_balance,
        "closing_balance_cents": opening_balance + total_credits - total_debits,
        "total_credits_cents": total_credits,
        "total_debits_cents": total_debits,
        "transaction_count": len(transactions),
        "transactions": transactions,
    }


def _dollars(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{abs(cents) // 100}.{abs(cents) % 100:02d}"


def render_csv(statement: dict) -> str:
    """One CSV line per ledger row; amounts in dollars, outflows negative."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for txn in statement["transactions"]:
        signed = txn.amount_cents if txn.type == TransactionType.CREDIT else -txn.amount_cents
        writer.writerow(
            [
                txn.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                txn.type.value,
                _dollars(signed),
                txn.description or "",
                _dollars(txn.balance_after_cents),
                txn.status.value,
            ]
        )
    return buffer.getvalue()


def csv_filename(statement: dict) -> str:
    return (
        f"statement-{statement['account_number']}-"
        f"{statement['year']}-{statement['month']:02d}.csv"
    )
