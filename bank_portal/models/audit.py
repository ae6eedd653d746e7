"""
AuditLog model - who did what in the back office.

Every state-changing admin action writes one row in the same database
transaction as the change itself. Rows are never updated or deleted.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class AuditAction(str, enum.Enum):
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_FROZEN = "account_frozen"
    ACCOUNT_UNFROZEN = "account_unfrozen"
    ACCOUNT_CLOSED = "account_closed"
    BALANCE_CREDITED = "balance_credited"
    BALANCE_DEBITED = "balance_debited"
    TRANSFER_APPROVED = "transfer_approved"
    TRANSFER_REJECTED = "transfer_rejected"
    EMAIL_SENT = "email_sent"
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DEACTIVATED = "user_deactivated"
    PASSWORD_RESET_SENT = "password_reset_sent"
    TICKET_UPDATED = "ticket_updated"
    KYC_REVIEWED = "kyc_reviewed"
    INHERITANCE_REVIEWED = "inheritance_reviewed"
    LOAN_REVIEWED = "loan_reviewed"
    NOTIFICATION_SENT = "notification_sent"
    TEMPLATE_CHANGED = "template_changed"
    EMAIL_CONFIGURATION_CHANGED = "email_configuration_changed"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    admin_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    target_user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    action: Mapped[AuditAction] = mapped_column(Enum(AuditAction), nullable=False, index=True)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
