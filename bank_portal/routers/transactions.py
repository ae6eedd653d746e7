"""
Transactions router - read access to the ledger.

Endpoints:
  GET /transactions                                       - All my accounts, newest first
  GET /accounts/{account_id}/transactions                 - One account, filterable
  GET /accounts/{account_id}/transactions/{transaction_id} - One ledger row

Ledger rows are written only by the operations that move money
(transfers, card purchases, bill payments, admin adjustments, ...).
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.transaction import TransactionStatus, TransactionType
from bank_portal.schemas.transaction import CustomerTransactionResponse, TransactionResponse
from bank_portal.services import transaction_service

router = APIRouter()


@router.get(
    "/transactions",
    response_model=list[CustomerTransactionResponse],
    summary="List transactions across my accounts",
)
async def list_my_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.get_customer_transactions(
        db, customer.id, limit=limit, offset=offset
    )


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=list[TransactionResponse],
    summary="List transactions for an account",
)
async def list_transactions(
    account_id: uuid.UUID,
    type: TransactionType | None = Query(None, description="Filter by type"),
    status: TransactionStatus | None = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    List one account's ledger rows, newest first.

    Declined rows (e.g. a card purchase the balance couldn't cover) are
    included; filter with `status=approved` to hide them.
    """
    return await transaction_service.get_account_transactions(
        db=db,
        account_id=account_id,
        customer_id=customer.id,
        type_filter=type,
        status_filter=status,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/accounts/{account_id}/transactions/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a single transaction",
)
async def get_transaction(
    account_id: uuid.UUID,
    transaction_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.get_transaction(
        db, account_id, transaction_id, customer.id
    )
