import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bank_portal.models.loan import LoanStatus


class LoanApplicationRequest(BaseModel):
    amount_cents: int = Field(gt=0)
    loan_type: str = Field(min_length=1, max_length=50)
    purpose: str | None = Field(None, max_length=500)
    term_months: int = Field(60, ge=1, le=360)


class LoanApproveRequest(BaseModel):
    interest_rate: Decimal = Field(ge=0, le=100, decimal_places=2)
    term_months: int = Field(ge=1, le=360)


class LoanRejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class LoanResponse(BaseModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    amount_cents: int
    loan_type: str
    purpose: str | None
    interest_rate: Decimal
    term_months: int
    status: LoanStatus
    monthly_payment_cents: int | None
    remaining_balance_cents: int | None
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    rejection_reason: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
