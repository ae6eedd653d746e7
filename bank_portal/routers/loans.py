"""
Loans router - loan applications.

Endpoints:
  POST /loans/apply - Apply for a loan
  GET  /loans       - My loans
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.loan import LoanApplicationRequest, LoanResponse
from bank_portal.services import loan_service

router = APIRouter()


@router.post(
    "/apply",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for a loan",
)
async def apply(
    request: LoanApplicationRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await loan_service.apply(db, customer, request)


@router.get(
    "",
    response_model=list[LoanResponse],
    summary="List my loans",
)
async def list_loans(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await loan_service.list_loans(db, customer.id)
