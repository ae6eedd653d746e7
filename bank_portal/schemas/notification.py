"""Pydantic schemas for in-app notifications."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from bank_portal.models.notification import NotificationStatus, NotificationType


class NotificationResponse(BaseModel):
    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    metadata: dict | None = Field(None, validation_alias="extra")
    read_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class UnreadCountResponse(BaseModel):
    unread_count: int


class AdminNotificationRequest(BaseModel):
    """Body for POST /admin/notifications/send."""
    user_id: uuid.UUID
    type: NotificationType = NotificationType.SYSTEM
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)


class AdminBulkNotificationRequest(BaseModel):
    user_ids: list[uuid.UUID] = Field(min_length=1)
    type: NotificationType = NotificationType.SYSTEM
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)


class AdminBroadcastRequest(BaseModel):
    type: NotificationType = NotificationType.ADMIN_ANNOUNCEMENT
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)


class SentCountResponse(BaseModel):
    sent_count: int
