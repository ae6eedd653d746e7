"""Pydantic schemas for inheritance processes and their documents."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from bank_portal.models.inheritance import InheritanceStatus


class InheritanceDocumentCreate(BaseModel):
    document_type: str = Field(min_length=1, max_length=50)
    file_name: str = Field(min_length=1, max_length=255)
    file_url: str = Field(min_length=1, max_length=500)


class InheritanceClaimRequest(BaseModel):
    """Customer-initiated claim, identifying the deceased by email."""
    deceased_email: EmailStr
    death_certificate_url: str = Field(min_length=1, max_length=500)
    will_document_url: str | None = Field(None, max_length=500)
    identification_url: str | None = Field(None, max_length=500)
    probate_document_url: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=2000)
    documents: list[InheritanceDocumentCreate] = []


class AdminInheritanceCreateRequest(BaseModel):
    deceased_user_id: uuid.UUID
    death_certificate_url: str | None = Field(None, max_length=500)
    will_document_url: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=2000)


class InheritanceReviewRequest(BaseModel):
    status: InheritanceStatus
    notes: str | None = Field(None, max_length=2000)
    rejection_reason: str | None = Field(None, max_length=500)


class InheritanceDocumentResponse(BaseModel):
    id: uuid.UUID
    document_type: str
    file_name: str
    file_url: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class InheritanceProcessResponse(BaseModel):
    id: uuid.UUID
    deceased_user_id: uuid.UUID
    initiated_by: uuid.UUID
    death_certificate_url: str | None
    will_document_url: str | None
    identification_url: str | None
    probate_document_url: str | None
    status: InheritanceStatus
    notes: str | None
    rejection_reason: str | None
    estimated_value_cents: int
    processed_by: uuid.UUID | None
    processed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class InheritanceProcessDetailResponse(InheritanceProcessResponse):
    documents: list[InheritanceDocumentResponse] = []
