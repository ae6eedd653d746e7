"""
Pydantic schemas for Account endpoints.

All monetary amounts are expressed in integer cents.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from bank_portal.models.account import AccountStatus, AccountType


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts."""
    account_type: AccountType = Field(
        default=AccountType.CHECKING,
        description="Type of bank account to create",
    )


class AccountResponse(BaseModel):
    """Public representation of a bank account."""
    id: uuid.UUID
    customer_id: uuid.UUID
    account_type: AccountType
    account_number: str
    routing_number: str
    cached_balance_cents: int
    currency: str
    status: AccountStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountLookupResponse(BaseModel):
    """Minimal account info for verifying a transfer recipient.

    Excludes the balance; the holder name lets the sender confirm the
    recipient before submitting.
    """
    id: uuid.UUID
    account_type: AccountType
    account_number: str
    account_holder_name: str


class BalanceResponse(BaseModel):
    """
    Balance check response - cached and ledger-computed values.

    `match` is False only if the cached balance disagrees with the ledger,
    which would indicate a data integrity problem.
    """
    account_id: uuid.UUID
    cached_balance_cents: int
    computed_balance_cents: int
    match: bool
    currency: str
