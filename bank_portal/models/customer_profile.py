"""
CustomerProfile model - personal details and KYC state for a user.

One-to-one with User (unique user_id). Holds what the back office needs to
know about a customer: names, contact details, address, employment, income
and the outcome of identity verification.

KYC fields:
  - kyc_status: overall state, recomputed whenever an admin reviews one of
    the customer's KycVerification rows (see kyc_service).
  - id_verification_status: outcome of the most recent "id" review.

The social security number is Fernet-encrypted at rest; only the last four
digits are kept in plaintext for display.
"""

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Date, DateTime, Enum, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_portal.database import Base


class KycStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class IdVerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class CustomerProfile(Base):
    __tablename__ = "customer_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    # --- Address ---
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="United States",
    )

    # --- Identity (encrypted) ---
    ssn_encrypted: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    ssn_last_four: Mapped[str | None] = mapped_column(String(4), nullable=True)

    # --- Employment ---
    employment_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    annual_income_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # --- KYC ---
    id_verification_status: Mapped[IdVerificationStatus] = mapped_column(
        Enum(IdVerificationStatus),
        default=IdVerificationStatus.PENDING,
        nullable=False,
    )
    kyc_status: Mapped[KycStatus] = mapped_column(
        Enum(KycStatus),
        default=KycStatus.PENDING,
        nullable=False,
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
    user: Mapped["User"] = relationship(back_populates="profile")

    accounts: Mapped[list["Account"]] = relationship(back_populates="customer")
