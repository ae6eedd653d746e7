"""
Email models: templates, per-event configuration and the send log.

EmailTemplate
  Admin-managed subject/body with {{placeholder}} variables. The variable
  list is extracted from the content whenever it is saved.

NotificationSetting
  One row per event type (account_created, transfer_status, ...). Controls
  whether the event sends an email and/or an in-app notification, and which
  template to render instead of the built-in body.

EmailNotification
  One row per send attempt with its outcome: sent, failed, or not_configured
  (no email provider key set).
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, String, Text, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from bank_portal.database import Base


class EmailEventType(str, enum.Enum):
    ACCOUNT_CREATED = "account_created"
    TRANSFER_STATUS = "transfer_status"
    BALANCE_CHANGE = "balance_change"
    ACCOUNT_STATUS = "account_status"
    PASSWORD_RESET = "password_reset"
    CUSTOM = "custom"


class EmailDeliveryStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"
    NOT_CONFIGURED = "not_configured"
    DISABLED = "disabled"


class EmailTemplate(Base):
    __tablename__ = "email_templates"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    text_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Free-form grouping, usually one of EmailEventType's values
    template_type: Mapped[str] = mapped_column(String(50), nullable=False)
    variables: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
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


class NotificationSetting(Base):
    __tablename__ = "notification_settings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    event_type: Mapped[EmailEventType] = mapped_column(
        Enum(EmailEventType),
        unique=True,
        nullable=False,
    )
    email_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    in_app_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    template_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("email_templates.id"),
        nullable=True,
    )

    updated_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class EmailNotification(Base):
    __tablename__ = "email_notifications"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )
    to_email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[EmailEventType] = mapped_column(Enum(EmailEventType), nullable=False)
    status: Mapped[EmailDeliveryStatus] = mapped_column(
        Enum(EmailDeliveryStatus),
        nullable=False,
    )
    error: Mapped[str | None] = mapped_column(String(500), nullable=True)
    extra: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
