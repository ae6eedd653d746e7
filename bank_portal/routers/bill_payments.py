"""
Bill payments router.

Endpoints:
  POST   /bill-payments       - Pay a bill now, or schedule it for its due date
  GET    /bill-payments       - List my bill payments
  DELETE /bill-payments/{id}  - Cancel a pending bill
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.bill_payment import BillPaymentCreateRequest, BillPaymentResponse
from bank_portal.services import bill_payment_service

router = APIRouter()


@router.post(
    "",
    response_model=BillPaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bill payment",
)
async def create_bill_payment(
    request: BillPaymentCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Without a due date, or with one today or earlier, the bill is paid
    immediately and gets a reference. A future due date stores it as
    pending after checking the balance covers it.
    """
    return await bill_payment_service.create_bill_payment(db, customer, request)


@router.get(
    "",
    response_model=list[BillPaymentResponse],
    summary="List my bill payments",
)
async def list_bill_payments(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await bill_payment_service.list_bill_payments(db, customer.id)


@router.delete(
    "/{bill_payment_id}",
    response_model=BillPaymentResponse,
    summary="Cancel a pending bill payment",
)
async def cancel_bill_payment(
    bill_payment_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await bill_payment_service.cancel_bill_payment(db, bill_payment_id, customer.id)
