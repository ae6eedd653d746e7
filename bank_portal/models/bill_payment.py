"""
BillPayment model - a payment to an external biller from one of the
customer's accounts.

Bills without a future due date are paid on creation (status PAID, with a
payment reference and a ledger debit). Bills due later are stored PENDING
and can be cancelled until they are paid. Recurring bills record their
frequency; this service does not execute them on a schedule.
"""

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Boolean, Date, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class BillPaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BillPayment(Base):
    __tablename__ = "bill_payments"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_bill_payments_positive_amount"),
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
        index=True,
    )

    # e.g. "utilities", "phone", "internet", "insurance", "credit_card"
    bill_type: Mapped[str] = mapped_column(String(50), nullable=False)
    biller_name: Mapped[str] = mapped_column(String(200), nullable=False)
    biller_account_number: Mapped[str] = mapped_column(String(50), nullable=False)

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurring_frequency: Mapped[str | None] = mapped_column(String(20), nullable=True)

    status: Mapped[BillPaymentStatus] = mapped_column(
        Enum(BillPaymentStatus),
        nullable=False,
        default=BillPaymentStatus.PENDING,
    )
    reference: Mapped[str | None] = mapped_column(String(30), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
