"""
Pydantic schemas for monthly statements.

Aggregates come first (the header of a printed statement), followed by the
month's ledger rows in chronological order.
"""

import uuid

from pydantic import BaseModel

from bank_portal.schemas.transaction import TransactionResponse


class StatementResponse(BaseModel):
    """Monthly account statement."""
    account_id: uuid.UUID
    account_number: str
    year: int
    month: int

    opening_balance_cents: int
    closing_balance_cents: int
    total_credits_cents: int
    total_debits_cents: int
    transaction_count: int

    transactions: list[TransactionResponse]
