"""Investment holdings bought from a customer's account."""

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class InvestmentType(str, enum.Enum):
    STOCKS = "stocks"
    MUTUAL_FUNDS = "mutual_funds"
    SAVINGS_PLAN = "savings_plan"
    FOREX = "forex"


class Investment(Base):
    __tablename__ = "investments"

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

    investment_type: Mapped[InvestmentType] = mapped_column(
        Enum(InvestmentType),
        nullable=False,
    )
    instrument_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Fractional units are allowed
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8), nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    current_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    amount_invested_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_value_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    profit_loss_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    purchased_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
