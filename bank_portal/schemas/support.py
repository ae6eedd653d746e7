"""Pydantic schemas for support tickets and chat messages."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from bank_portal.models.support import TicketPriority, TicketStatus


class TicketCreateRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    category: str = Field(min_length=1, max_length=50)
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    subject: str
    description: str
    category: str
    priority: TicketPriority
    status: TicketStatus
    assigned_to: uuid.UUID | None
    resolution: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TicketUpdateRequest(BaseModel):
    """Admin update; only the fields present are changed."""
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_to: uuid.UUID | None = None
    resolution: str | None = Field(None, max_length=5000)


class ChatMessageCreateRequest(BaseModel):
    message: str = Field(min_length=1, max_length=5000)


class ChatMessageResponse(BaseModel):
    id: uuid.UUID
    ticket_id: uuid.UUID
    sender_id: uuid.UUID
    message: str
    is_from_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}
