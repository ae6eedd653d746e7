"""
Savings goals and standing orders.

SavingsGoal: money set aside from a linked account toward a target amount.
Contributions debit the linked account and raise current_amount_cents.

StandingOrder: a stored recurring-transfer template (recipient, amount,
frequency, next payment date, optional end date). Deactivating it stops it;
execution is left to an external scheduler.
"""

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Boolean, Date, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class Frequency(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class SavingsGoal(Base):
    __tablename__ = "savings_goals"

    __table_args__ = (
        CheckConstraint("target_amount_cents > 0", name="ck_savings_goals_positive_target"),
        CheckConstraint("current_amount_cents >= 0", name="ck_savings_goals_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customer_profiles.id"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    target_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    current_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    auto_deposit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deposit_amount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deposit_frequency: Mapped[Frequency | None] = mapped_column(Enum(Frequency), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

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

    @property
    def progress_percent(self) -> float:
        return round(min(self.current_amount_cents / self.target_amount_cents, 1.0) * 100, 2)


class StandingOrder(Base):
    __tablename__ = "standing_orders"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_standing_orders_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customer_profiles.id"),
        nullable=False,
        index=True,
    )
    from_account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    to_account_number: Mapped[str] = mapped_column(String(20), nullable=False)
    to_account_holder_name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    frequency: Mapped[Frequency] = mapped_column(Enum(Frequency), nullable=False)
    next_payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
