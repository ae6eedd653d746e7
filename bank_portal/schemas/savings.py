"""Pydantic schemas for savings goals and standing orders."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from bank_portal.models.savings import Frequency


class SavingsGoalCreateRequest(BaseModel):
    account_id: uuid.UUID
    name: str = Field(min_length=1, max_length=100)
    target_amount_cents: int = Field(gt=0)
    target_date: date | None = None
    auto_deposit: bool = False
    deposit_amount_cents: int | None = Field(None, gt=0)
    deposit_frequency: Frequency | None = None

    @model_validator(mode="after")
    def auto_deposit_needs_schedule(self):
        if self.auto_deposit and (
            self.deposit_amount_cents is None or self.deposit_frequency is None
        ):
            raise ValueError("Auto deposit needs deposit_amount_cents and deposit_frequency")
        return self


class SavingsGoalResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    name: str
    target_amount_cents: int
    current_amount_cents: int
    progress_percent: float
    target_date: date | None
    auto_deposit: bool
    deposit_amount_cents: int | None
    deposit_frequency: Frequency | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SavingsContributionRequest(BaseModel):
    amount_cents: int = Field(gt=0)


class StandingOrderCreateRequest(BaseModel):
    from_account_id: uuid.UUID
    to_account_number: str = Field(pattern=r"^\d{6,20}$")
    to_account_holder_name: str = Field(min_length=1, max_length=200)
    amount_cents: int = Field(gt=0)
    frequency: Frequency
    next_payment_date: date
    end_date: date | None = None
    description: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date is not None and self.end_date < self.next_payment_date:
            raise ValueError("end_date must not be before next_payment_date")
        return self


class StandingOrderResponse(BaseModel):
    id: uuid.UUID
    from_account_id: uuid.UUID
    to_account_number: str
    to_account_holder_name: str
    amount_cents: int
    frequency: Frequency
    next_payment_date: date
    end_date: date | None
    description: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
