"""
Pydantic schemas for transfers.

A transfer names its destination either by internal account id or by
account number + routing number (+ bank name for other banks).
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, model_validator

from bank_portal.models.transfer import TransferStatus


class TransferCreateRequest(BaseModel):
    """Request body for POST /transfers."""
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID | None = None
    to_account_number: str | None = Field(None, pattern=r"^\d{6,20}$")
    to_routing_number: str | None = Field(None, pattern=r"^\d{9}$")
    to_bank_name: str | None = Field(None, max_length=100)
    to_account_holder_name: str | None = Field(None, min_length=1, max_length=200)
    recipient_email: EmailStr | None = None
    recipient_phone: str | None = Field(None, max_length=20)
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    description: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def destination_required(self):
        """Either an internal account id or an account number must be given."""
        if self.to_account_id is None and self.to_account_number is None:
            raise ValueError("Provide to_account_id or to_account_number")
        if self.to_account_id is not None and self.to_account_id == self.from_account_id:
            raise ValueError("Cannot transfer to the same account")
        return self


class TransferResponse(BaseModel):
    id: uuid.UUID
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID | None
    to_account_number: str
    to_routing_number: str
    to_bank_name: str | None
    to_account_holder_name: str
    recipient_email: str | None
    amount_cents: int
    fee_cents: int
    tax_cents: int
    total_debit_cents: int
    description: str | None
    status: TransferStatus
    rejection_reason: str | None
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    completed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TransferStatusResponse(BaseModel):
    """Lightweight body for status polling."""
    id: uuid.UUID
    status: TransferStatus
    rejection_reason: str | None
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransferRejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)
