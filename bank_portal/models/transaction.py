"""
Transaction model - the account ledger.

Every movement of money creates one Transaction row against ONE account.
Reading an account's rows in order reproduces its balance history:

  - CREDIT: money into the account (admin credit, incoming transfer)
  - DEBIT: money out (approved transfer, card purchase, bill payment,
    investment, savings contribution, admin debit)
  - FEE / TAX: transfer charges, written next to the transfer's debit row

Key fields:
  - amount_cents: always positive; the direction is implied by the type
  - balance_after_cents: the account balance right after this row was applied
  - status: "approved" rows moved money; "declined" rows are an audit trail
    of attempts that were refused (balance_after is the unchanged balance)
  - transfer_id: set on rows written when a transfer is approved
  - card_id: set on card purchases
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class TransactionType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    FEE = "fee"
    TAX = "tax"


class TransactionStatus(str, enum.Enum):
    APPROVED = "approved"
    DECLINED = "declined"


# Types that take money out of the account
OUTFLOW_TYPES = (TransactionType.DEBIT, TransactionType.FEE, TransactionType.TAX)


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    balance_after_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus),
        nullable=False,
        default=TransactionStatus.APPROVED,
    )

    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    transfer_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("transfers.id"),
        nullable=True,
        index=True,
    )

    card_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("cards.id"),
        nullable=True,
        index=True,
    )

    # Indexed for date-range queries (statements, daily card limits, stats)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
