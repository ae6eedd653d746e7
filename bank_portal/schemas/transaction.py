"""Pydantic schemas for ledger rows. Amounts are integer cents."""

import uuid
from datetime import datetime

from pydantic import BaseModel

from bank_portal.models.transaction import TransactionStatus, TransactionType


class TransactionResponse(BaseModel):
    """Public representation of a ledger row."""
    id: uuid.UUID
    account_id: uuid.UUID
    type: TransactionType
    amount_cents: int
    balance_after_cents: int
    status: TransactionStatus
    description: str | None
    transfer_id: uuid.UUID | None
    card_id: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}


class CustomerTransactionResponse(TransactionResponse):
    """Row in the cross-account history, tagged with its account number."""
    account_number: str
