"""
Transfers router - customer-initiated transfers.

Endpoints:
  POST /transfers              - Submit a transfer for review
  GET  /transfers              - Transfers from or to my accounts
  GET  /transfers/{id}         - One transfer
  GET  /transfers/{id}/status  - Status polling

Transfers are not executed on submission. They wait in
`verification_required` until an admin approves (money moves) or rejects
them through /admin/transfers.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.rate_limit import rate_limit
from bank_portal.schemas.transfer import (
    TransferCreateRequest,
    TransferResponse,
    TransferStatusResponse,
)
from bank_portal.services import transfer_service

router = APIRouter()


@router.post(
    "",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a transfer",
    dependencies=[Depends(rate_limit(10))],
)
async def create_transfer(
    request: TransferCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Submit a transfer from one of my accounts.

    - **from_account_id**: Must belong to the authenticated customer and be active
    - **to_account_id** or **to_account_number**: the destination. A number
      with no routing number (or ours) must be an account at this bank;
      anything else is an external transfer and needs **to_account_holder_name**
    - **amount_cents**: Positive integer in cents

    A fee (0.1% above $1,000) and a tax (0.1%) are added; the balance must
    cover the total.
    """
    return await transfer_service.create_transfer(db, customer, request)


@router.get(
    "",
    response_model=list[TransferResponse],
    summary="List my transfers",
)
async def list_transfers(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await transfer_service.list_transfers(db, customer.id, limit=limit, offset=offset)


@router.get(
    "/{transfer_id}",
    response_model=TransferResponse,
    summary="Get a transfer",
)
async def get_transfer(
    transfer_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await transfer_service.get_transfer(db, transfer_id, customer.id)


@router.get(
    "/{transfer_id}/status",
    response_model=TransferStatusResponse,
    summary="Poll a transfer's status",
)
async def get_transfer_status(
    transfer_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await transfer_service.get_transfer(db, transfer_id, customer.id)
