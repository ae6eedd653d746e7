"""
Loan model - a customer's loan application and its review outcome.

Applications start PENDING with default pricing (5.5% over 60 months).
Approval sets the final rate and term and computes the monthly payment on
the loan's own principal; rejection stores a reason. ACTIVE, COMPLETED and
DEFAULTED describe the repayment phase.
"""

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, Numeric, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class LoanStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"


class Loan(Base):
    __tablename__ = "loans"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_loans_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customer_profiles.id"),
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    # e.g. "personal", "auto", "mortgage", "business"
    loan_type: Mapped[str] = mapped_column(String(50), nullable=False)
    purpose: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Annual percentage rate
    interest_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("5.50"),
    )
    term_months: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus),
        nullable=False,
        default=LoanStatus.PENDING,
        index=True,
    )

    monthly_payment_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    remaining_balance_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)

    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
