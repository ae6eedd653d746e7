"""
Account model - a bank account owned by a customer.

Each account has:
  - A unique account number (random 10-digit string) and the bank's
    routing number
  - A type: checking, savings or business
  - A status: active, frozen or closed. Only active accounts move money.
  - A cached balance in integer cents

Balance management:
  `cached_balance_cents` is updated in the same database transaction as the
  ledger row (Transaction) that records the movement, so it always equals
  credits minus debits, fees and taxes for the account. The balance endpoint
  recomputes it from the ledger and reports whether the two agree.

  A CHECK constraint keeps the balance from ever going negative. The service
  layer checks first; the constraint is the last line of defense.

Why integer cents?
  Binary floating point cannot represent most decimal amounts exactly.
  $10.99 is stored as 1099 and all arithmetic stays exact. Clients divide
  by 100 for display.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_portal.config import settings
from bank_portal.database import Base


class AccountType(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    BUSINESS = "business"


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    FROZEN = "frozen"
    CLOSED = "closed"


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint(
            "cached_balance_cents >= 0",
            name="ck_accounts_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customer_profiles.id"),
        nullable=False,
        index=True,
    )

    account_type: Mapped[AccountType] = mapped_column(
        Enum(AccountType),
        nullable=False,
        default=AccountType.CHECKING,
    )

    account_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )

    routing_number: Mapped[str] = mapped_column(
        String(9),
        nullable=False,
        default=lambda: settings.ROUTING_NUMBER,
    )

    cached_balance_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # ISO 4217 currency code
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="USD",
    )

    status: Mapped[AccountStatus] = mapped_column(
        Enum(AccountStatus),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )

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

    # --- Relationships ---
    customer: Mapped["CustomerProfile"] = relationship(back_populates="accounts")
