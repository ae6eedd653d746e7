"""Beneficiaries a customer designates for their estate."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Boolean, Date, DateTime, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class Beneficiary(Base):
    __tablename__ = "beneficiaries"

    __table_args__ = (
        CheckConstraint(
            "percentage > 0 AND percentage <= 100",
            name="ck_beneficiaries_percentage_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customer_profiles.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    relationship_type: Mapped[str] = mapped_column("relationship", String(50), nullable=False)
    # Share of the estate; active shares per customer sum to at most 100
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    contact_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
