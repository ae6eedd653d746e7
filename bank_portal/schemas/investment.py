import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from bank_portal.models.investment import InvestmentType


class InvestmentCreateRequest(BaseModel):
    """Request body for POST /investments."""
    account_id: uuid.UUID
    investment_type: InvestmentType
    instrument_name: str = Field(min_length=1, max_length=100)
    amount_cents: int = Field(gt=0, description="Amount to invest in cents")


class InvestmentResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    investment_type: InvestmentType
    instrument_name: str
    quantity: Decimal
    purchase_price: Decimal
    current_price: Decimal
    amount_invested_cents: int
    total_value_cents: int
    profit_loss_cents: int
    purchased_at: datetime

    model_config = {"from_attributes": True}


class PortfolioResponse(BaseModel):
    total_invested_cents: int
    total_value_cents: int
    total_profit_loss_cents: int
    holdings: list[InvestmentResponse]
