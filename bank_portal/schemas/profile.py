"""
Pydantic schemas for the customer profile.

The SSN is write-only: requests may set it, responses only ever show the
last four digits. KYC status fields are read-only for customers.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from bank_portal.models.customer_profile import IdVerificationStatus, KycStatus


class ProfileResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    first_name: str
    last_name: str
    phone: str | None
    date_of_birth: date | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    country: str
    ssn_last_four: str | None
    employment_status: str | None
    annual_income_cents: int | None
    id_verification_status: IdVerificationStatus
    kyc_status: KycStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    """Request body for PATCH /profile (all fields optional)."""
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, min_length=1, max_length=100)
    ssn: str | None = Field(None, pattern=r"^\d{3}-?\d{2}-?\d{4}$")
    employment_status: str | None = Field(None, max_length=50)
    annual_income_cents: int | None = Field(None, ge=0)
