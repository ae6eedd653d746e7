"""
Investments router.

Endpoints:
  POST /investments - Buy an instrument with money from one of my accounts
  GET  /investments - My holdings and portfolio totals
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.investment import (
    InvestmentCreateRequest,
    InvestmentResponse,
    PortfolioResponse,
)
from bank_portal.services import investment_service

router = APIRouter()


@router.post(
    "",
    response_model=InvestmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Make an investment",
)
async def create_investment(
    request: InvestmentCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """The account is debited by **amount_cents**; quantity = amount / price."""
    return await investment_service.buy(
        db,
        customer,
        request.account_id,
        request.investment_type,
        request.instrument_name,
        request.amount_cents,
    )


@router.get(
    "",
    response_model=PortfolioResponse,
    summary="Get my portfolio",
)
async def get_portfolio(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await investment_service.get_portfolio(db, customer.id)
