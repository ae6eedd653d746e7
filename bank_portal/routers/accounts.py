"""
Accounts router - the authenticated customer's bank accounts.

Endpoints:
  POST /accounts                         - Open a new account
  GET  /accounts                         - List my accounts
  GET  /accounts/lookup/{account_number} - Confirm a transfer recipient
  GET  /accounts/{account_id}            - Get one of my accounts
  GET  /accounts/{account_id}/balance    - Cached vs. ledger-computed balance

Admins are blocked from these endpoints (they use /admin/accounts).
"""

import uuid

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.rate_limit import rate_limit
from bank_portal.schemas.account import (
    AccountCreateRequest,
    AccountLookupResponse,
    AccountResponse,
    BalanceResponse,
)
from bank_portal.services import account_service

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a new bank account",
    dependencies=[Depends(rate_limit(5))],
)
async def create_account(
    request: AccountCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Open a checking, savings or business account with a zero balance.

    A unique 10-digit account number is generated and a welcome email is
    sent to the customer.
    """
    return await account_service.create_account(db, customer, request.account_type)


@router.get(
    "",
    response_model=list[AccountResponse],
    summary="List my accounts",
)
async def list_accounts(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.get_accounts(db, customer.id)


@router.get(
    "/lookup/{account_number}",
    response_model=AccountLookupResponse,
    summary="Look up a recipient account by number",
)
async def lookup_account(
    account_number: str = Path(pattern=r"^\d{6,20}$"),
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """Returns the account type and holder name only; never the balance."""
    return await account_service.lookup_account(db, account_number)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    account_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.get_account(db, account_id, customer.id)


@router.get(
    "/{account_id}/balance",
    response_model=BalanceResponse,
    summary="Get account balance",
)
async def get_balance(
    account_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Returns both the cached balance and the balance recomputed from the
    ledger. `match` is False only if the two disagree.
    """
    return await account_service.get_balance(db, account_id, customer.id)
