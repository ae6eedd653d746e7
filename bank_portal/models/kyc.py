"""
KycVerification model - one identity check submitted by a customer.

Customers submit a verification per type (id, ssn, address, email, phone)
with an optional document URL. Admins review PENDING rows into VERIFIED or
REJECTED (a rejection carries a reason). Each review recomputes the
customer's overall kyc_status on CustomerProfile.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class VerificationType(str, enum.Enum):
    ID = "id"
    SSN = "ssn"
    ADDRESS = "address"
    EMAIL = "email"
    PHONE = "phone"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class KycVerification(Base):
    __tablename__ = "kyc_verifications"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    verification_type: Mapped[VerificationType] = mapped_column(
        Enum(VerificationType),
        nullable=False,
    )
    status: Mapped[VerificationStatus] = mapped_column(
        Enum(VerificationStatus),
        nullable=False,
        default=VerificationStatus.PENDING,
        index=True,
    )

    document_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    verified_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
