"""
User model - the authentication identity.

Each User is a login credential (email + Argon2 password hash) with a role.
Banking identity and KYC data live on CustomerProfile, which every user gets
at creation time:

    User (auth, role) --> CustomerProfile (names, address, KYC) --> Account(s)

Roles:
  - ADMIN: back-office staff. Reviews transfers, KYC, inheritance and loans,
    manages users, balances, templates and notifications.
  - CUSTOMER: the default role for signup. Uses the customer portal.

Deactivated users (is_active=False) keep their data but cannot log in.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bank_portal.database import Base


class UserRole(str, enum.Enum):
    """Role a user holds. Inherits from str so it serializes to plain JSON."""
    ADMIN = "admin"
    CUSTOMER = "customer"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Login identifier
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        default=UserRole.CUSTOMER,
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
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
    profile: Mapped["CustomerProfile"] = relationship(
        back_populates="user",
        uselist=False,
    )
