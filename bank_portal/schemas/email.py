"""Pydantic schemas for email templates, per-event configuration and admin email."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from bank_portal.models.email import EmailEventType


class EmailTemplateCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    subject: str = Field(min_length=1, max_length=200)
    html_content: str = Field(min_length=1)
    text_content: str | None = None
    template_type: str = Field(min_length=1, max_length=50)
    is_active: bool = True


class EmailTemplateUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    subject: str | None = Field(None, min_length=1, max_length=200)
    html_content: str | None = Field(None, min_length=1)
    text_content: str | None = None
    template_type: str | None = Field(None, min_length=1, max_length=50)
    is_active: bool | None = None


class EmailTemplateResponse(BaseModel):
    id: uuid.UUID
    name: str
    subject: str
    html_content: str
    text_content: str | None
    template_type: str
    variables: list[str]
    is_active: bool
    created_by: uuid.UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TemplatePreviewRequest(BaseModel):
    variables: dict[str, str] = {}


class TemplatePreviewResponse(BaseModel):
    subject: str
    html: str
    text: str | None


class NotificationSettingUpdateRequest(BaseModel):
    email_enabled: bool | None = None
    in_app_enabled: bool | None = None
    template_id: uuid.UUID | None = None
    clear_template: bool = False


class NotificationSettingResponse(BaseModel):
    event_type: EmailEventType
    email_enabled: bool
    in_app_enabled: bool
    template_id: uuid.UUID | None

    model_config = {"from_attributes": True}


class AdminEmailRequest(BaseModel):
    """Body for POST /admin/email."""
    user_ids: list[uuid.UUID] = Field(min_length=1)
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)


class AdminEmailResponse(BaseModel):
    requested: int
    sent_count: int
