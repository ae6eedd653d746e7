"""
Pydantic schemas for Card endpoints.

Card numbers and CVVs are never returned; only the last four digits are
exposed.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from bank_portal.models.card import CardStatus, CardType


class CardCreateRequest(BaseModel):
    """Request body for POST /cards."""
    account_id: uuid.UUID
    card_type: CardType = CardType.DEBIT
    spending_limit_cents: int | None = Field(None, gt=0)
    daily_limit_cents: int | None = Field(None, gt=0)


class CardResponse(BaseModel):
    """Public representation of a card (masked)."""
    id: uuid.UUID
    account_id: uuid.UUID
    card_number_last_four: str
    cardholder_name: str
    expiration_month: int
    expiration_year: int
    card_type: CardType
    status: CardStatus
    spending_limit_cents: int
    daily_limit_cents: int
    is_virtual: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CardStatusUpdateRequest(BaseModel):
    status: CardStatus


class CardLimitsUpdateRequest(BaseModel):
    spending_limit_cents: int | None = Field(None, gt=0)
    daily_limit_cents: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def at_least_one_limit(self):
        if self.spending_limit_cents is None and self.daily_limit_cents is None:
            raise ValueError("Provide spending_limit_cents or daily_limit_cents")
        return self


class CardPurchaseRequest(BaseModel):
    """Request body for POST /cards/{id}/purchases."""
    amount_cents: int = Field(gt=0)
    merchant: str = Field(min_length=1, max_length=200)
