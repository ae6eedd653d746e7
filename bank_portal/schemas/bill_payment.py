import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from bank_portal.models.bill_payment import BillPaymentStatus
from bank_portal.models.savings import Frequency


class BillPaymentCreateRequest(BaseModel):
    """Request body for POST /bill-payments."""
    account_id: uuid.UUID
    bill_type: str = Field(min_length=1, max_length=50)
    biller_name: str = Field(min_length=1, max_length=200)
    biller_account_number: str = Field(min_length=1, max_length=50)
    amount_cents: int = Field(gt=0)
    due_date: date | None = None
    is_recurring: bool = False
    recurring_frequency: Frequency | None = None

    @model_validator(mode="after")
    def recurring_needs_frequency(self):
        if self.is_recurring and self.recurring_frequency is None:
            raise ValueError("Recurring bills need a recurring_frequency")
        return self


class BillPaymentResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    bill_type: str
    biller_name: str
    biller_account_number: str
    amount_cents: int
    due_date: date | None
    is_recurring: bool
    recurring_frequency: str | None
    status: BillPaymentStatus
    reference: str | None
    paid_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
