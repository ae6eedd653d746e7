"""
Card service - issuance, status and limits, and card purchases.

When a card is issued:
  1. A 16-digit card number and a 3-digit CVV are randomly generated
  2. Expiration is set to 4 years from now
  3. The number and CVV are Fernet-encrypted before storage
  4. Only the last four digits are stored in plaintext (for display)

An account may carry several cards (for example a physical debit card and
a virtual card for online shopping).

Purchases:
  A purchase needs an ACTIVE card on an ACTIVE account. It must not exceed
  the card's spending limit (per purchase) or, together with the day's
  earlier approved purchases, its daily limit. A purchase the balance can't
  cover is written to the ledger as DECLINED before the error is returned.
"""

import random
import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.exceptions import (
    BusinessRuleError,
    CardLimitExceededError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.card import Card, CardStatus, CardType
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.transaction import Transaction, TransactionStatus
from bank_portal.security import encrypt_value
from bank_portal.services import account_service, transaction_service

logger = structlog.get_logger()

CARD_VALIDITY_YEARS = 4


def _generate_card_number() -> str:
    """Random 16-digit number starting with "4" (Visa-like)."""
    return "4" + "".join([str(random.randint(0, 9)) for _ in range(15)])


def _generate_cvv() -> str:
    return "".join([str(random.randint(0, 9)) for _ in range(3)])


async def issue_card(
    db: AsyncSession,
    customer: CustomerProfile,
    account_id: uuid.UUID,
    card_type: CardType = CardType.DEBIT,
    spending_limit_cents: int | None = None,
    daily_limit_cents: int | None = None,
) -> Card:
    """
    Issue a new card on one of the customer's accounts.

    Raises:
        AccountNotFoundError / UnauthorizedAccessError: account checks.
        AccountNotActiveError: the account is frozen or closed.
    """
    account = await account_service.get_account(db, account_id, customer.id)
    transaction_service.ensure_active(account)

    card_number = _generate_card_number()
    cvv = _generate_cvv()
    now = datetime.now(timezone.utc)

    card = Card(
        account_id=account.id,
        customer_id=customer.id,
        card_number_encrypted=encrypt_value(card_number),
        card_number_last_four=card_number[-4:],
        cardholder_name=f"{customer.first_name} {customer.last_name}".upper(),
        expiration_month=now.month,
        expiration_year=now.year + CARD_VALIDITY_YEARS,
        cvv_encrypted=encrypt_value(cvv),
        card_type=card_type,
        is_virtual=card_type == CardType.VIRTUAL,
    )
    if spending_limit_cents is not None:
        card.spending_limit_cents = spending_limit_cents
    if daily_limit_cents is not None:
        card.daily_limit_cents = daily_limit_cents

    db.add(card)
    await db.flush()

    logger.info(
        "card_issued",
        card_id=str(card.id),
        account_id=str(account.id),
        card_type=card_type.value,
    )
    return card


async def list_cards(db: AsyncSession, customer_id: uuid.UUID) -> list[Card]:
    result = await db.execute(
        select(Card)
        .where(Card.customer_id == customer_id)
        .order_by(Card.created_at)
    )
    return list(result.scalars().all())


async def get_card(
    db: AsyncSession,
    card_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> Card:
    """
    Raises:
        ResourceNotFoundError: No such card.
        UnauthorizedAccessError: The card belongs to someone else.
    """
    card = await db.get(Card, card_id)
    if card is None:
        raise ResourceNotFoundError("Card", card_id)
    if card.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this card")
    return card


async def update_status(
    db: AsyncSession,
    card_id: uuid.UUID,
    customer_id: uuid.UUID,
    new_status: CardStatus,
) -> Card:
    """Freeze, unfreeze or cancel a card. Cancelled cards can't change again."""
    card = await get_card(db, card_id, customer_id)

    if card.status == CardStatus.CANCELLED:
        raise InvalidStatusTransitionError("Card", card.status.value, new_status.value)

    if card.status != new_status:
        logger.info(
            "card_status_changed",
            card_id=str(card.id),
            previous_status=card.status.value,
            new_status=new_status.value,
        )
        card.status = new_status
        await db.flush()
    return card


async def update_limits(
    db: AsyncSession,
    card_id: uuid.UUID,
    customer_id: uuid.UUID,
    spending_limit_cents: int | None = None,
    daily_limit_cents: int | None = None,
) -> Card:
    card = await get_card(db, card_id, customer_id)

    if card.status == CardStatus.CANCELLED:
        raise InvalidStatusTransitionError("Card", card.status.value)

    if spending_limit_cents is not None:
        card.spending_limit_cents = spending_limit_cents
    if daily_limit_cents is not None:
        card.daily_limit_cents = daily_limit_cents
    await db.flush()
    return card


async def _spent_today(db: AsyncSession, card_id: uuid.UUID) -> int:
    now = datetime.now(timezone.utc)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    result = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount_cents), 0))
        .where(Transaction.card_id == card_id)
        .where(Transaction.status == TransactionStatus.APPROVED)
        .where(Transaction.created_at >= start_of_day)
    )
    return result.scalar()


async def purchase(
    db: AsyncSession,
    card_id: uuid.UUID,
    customer_id: uuid.UUID,
    amount_cents: int,
    merchant: str,
) -> Transaction:
    """
    Charge a purchase to a card's account.

    Raises:
        BusinessRuleError: The card is frozen or cancelled.
        CardLimitExceededError: Spending or daily limit exceeded.
        AccountNotActiveError: The account is frozen or closed.
        InsufficientFundsError: Balance too low (a DECLINED row is recorded).
    """
    card = await get_card(db, card_id, customer_id)
    if card.status != CardStatus.ACTIVE:
        raise BusinessRuleError(f"Card is {card.status.value}")

    # Serializes purchases on the account so the daily sum below stays current.
    account = await transaction_service.lock_account(db, card.account_id)

    if amount_cents > card.spending_limit_cents:
        raise CardLimitExceededError("spending", card.spending_limit_cents, amount_cents)

    spent_today = await _spent_today(db, card.id)
    if spent_today + amount_cents > card.daily_limit_cents:
        raise CardLimitExceededError("daily", card.daily_limit_cents, spent_today + amount_cents)

    txn = await transaction_service.debit_account(
        db,
        account,
        amount_cents,
        description=f"Card purchase at {merchant}",
        card_id=card.id,
        record_declined=True,
    )
    logger.info("card_purchase", card_id=str(card.id), amount_cents=amount_cents)
    return txn
