"""Pydantic schemas for back-office account operations and dashboard stats."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from bank_portal.schemas.account import AccountResponse
from bank_portal.schemas.transaction import TransactionResponse


class BalanceAdjustmentRequest(BaseModel):
    """Body for POST /admin/accounts/{id}/credit and /debit."""
    amount_cents: int = Field(gt=0)
    description: str = Field(min_length=1, max_length=200)


class BalanceAdjustmentResponse(BaseModel):
    account: AccountResponse
    transaction: TransactionResponse


class AccountStatusChangeRequest(BaseModel):
    status: Literal["active", "frozen", "closed"]
    reason: str = Field(min_length=1, max_length=500)


class UserStats(BaseModel):
    total: int
    admins: int
    customers: int
    new_last_24h: int


class AccountStats(BaseModel):
    total: int
    active: int
    frozen: int
    closed: int
    total_active_balance_cents: int


class TransferStats(BaseModel):
    pending_review: int
    completed: int
    rejected: int


class TransactionStats(BaseModel):
    count_last_24h: int
    debit_volume_30d_cents: int


class AdminStatsResponse(BaseModel):
    users: UserStats
    accounts: AccountStats
    transfers: TransferStats
    transactions: TransactionStats
    generated_at: datetime
