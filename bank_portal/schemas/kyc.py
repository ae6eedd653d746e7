import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from bank_portal.models.kyc import VerificationStatus, VerificationType


class KycSubmitRequest(BaseModel):
    verification_type: VerificationType
    document_url: str | None = Field(None, max_length=500)


class KycVerificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    verification_type: VerificationType
    status: VerificationStatus
    document_url: str | None
    verified_by: uuid.UUID | None
    verified_at: datetime | None
    rejection_reason: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class KycReviewRequest(BaseModel):
    status: Literal["verified", "rejected"]
    rejection_reason: str | None = Field(None, min_length=1, max_length=500)

    @model_validator(mode="after")
    def rejection_needs_reason(self):
        if self.status == "rejected" and not self.rejection_reason:
            raise ValueError("A rejection_reason is required when rejecting")
        return self
