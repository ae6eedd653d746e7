"""
Card model - a debit, credit or virtual card linked to an account.

Card numbers and CVVs are encrypted at rest using Fernet. Only the last
four digits are stored in plaintext for display ("ending in 1234").
Encryption rather than hashing keeps the number recoverable for payment
processing while protecting it in the database.

Limits:
  - spending_limit_cents: largest single purchase
  - daily_limit_cents: total of approved purchases per UTC day

A CANCELLED card is terminal: it can't be reactivated or frozen.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Boolean, DateTime, Enum, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class CardType(str, enum.Enum):
    DEBIT = "debit"
    CREDIT = "credit"
    VIRTUAL = "virtual"


class CardStatus(str, enum.Enum):
    ACTIVE = "active"
    FROZEN = "frozen"
    CANCELLED = "cancelled"


class Card(Base):
    __tablename__ = "cards"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customer_profiles.id"),
        nullable=False,
        index=True,
    )

    # Fernet-encrypted full card number
    card_number_encrypted: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    card_number_last_four: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )

    cardholder_name: Mapped[str] = mapped_column(String(200), nullable=False)

    expiration_month: Mapped[int] = mapped_column(Integer, nullable=False)
    expiration_year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Fernet-encrypted CVV
    cvv_encrypted: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    card_type: Mapped[CardType] = mapped_column(
        Enum(CardType),
        nullable=False,
        default=CardType.DEBIT,
    )

    status: Mapped[CardStatus] = mapped_column(
        Enum(CardStatus),
        nullable=False,
        default=CardStatus.ACTIVE,
    )

    spending_limit_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=500_000,
    )
    daily_limit_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=100_000,
    )

    is_virtual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
