"""
Transfer model - a customer's request to move money, reviewed by an admin.

A transfer is created in VERIFICATION_REQUIRED status with its fee and tax
already computed. No money moves until an admin approves it; approval
writes the ledger rows (debit, fee, tax on the source, credit on an internal
destination) and marks the transfer COMPLETED. Rejection stores a reason.

Destinations are either internal (to_account_id set) or external (bank
details only). External transfers only debit the source.

Status lifecycle:

    verification_required ──approve──> completed
            │                  └─────> failed   (funds or status changed)
            └──────reject───> rejected

PENDING, PROCESSING and APPROVED exist for clients that track richer
states; admin review accepts PENDING and PROCESSING like
VERIFICATION_REQUIRED.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class TransferStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    VERIFICATION_REQUIRED = "verification_required"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


# Statuses an admin may approve or reject from
REVIEWABLE_STATUSES = (
    TransferStatus.PENDING,
    TransferStatus.PROCESSING,
    TransferStatus.VERIFICATION_REQUIRED,
)


class Transfer(Base):
    __tablename__ = "transfers"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transfers_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    from_account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    # Set when the destination is an account at this bank
    to_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=True,
        index=True,
    )

    # --- Recipient details ---
    to_account_number: Mapped[str] = mapped_column(String(20), nullable=False)
    to_routing_number: Mapped[str] = mapped_column(String(9), nullable=False)
    to_bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    to_account_holder_name: Mapped[str] = mapped_column(String(200), nullable=False)
    recipient_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    recipient_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # --- Money ---
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # --- Review ---
    status: Mapped[TransferStatus] = mapped_column(
        Enum(TransferStatus),
        nullable=False,
        default=TransferStatus.VERIFICATION_REQUIRED,
        index=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def total_debit_cents(self) -> int:
        """What approval takes out of the source account."""
        return self.amount_cents + self.fee_cents + self.tax_cents
