"""
Cards router - card issuance, controls and purchases.

Endpoints:
  POST  /cards                   - Issue a card on one of my accounts
  GET   /cards                   - List my cards
  GET   /cards/{card_id}         - Get one card
  PATCH /cards/{card_id}/status  - Freeze, unfreeze or cancel
  PATCH /cards/{card_id}/limits  - Change spending / daily limits
  POST  /cards/{card_id}/purchases - Charge a purchase to the card

Card numbers and CVVs are encrypted at rest and never returned in API
responses - only the last four digits are exposed for display.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.rate_limit import rate_limit
from bank_portal.schemas.card import (
    CardCreateRequest,
    CardLimitsUpdateRequest,
    CardPurchaseRequest,
    CardResponse,
    CardStatusUpdateRequest,
)
from bank_portal.schemas.transaction import TransactionResponse
from bank_portal.services import card_service

router = APIRouter()


@router.post(
    "",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue a card",
    dependencies=[Depends(rate_limit(3))],
)
async def issue_card(
    request: CardCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Issue a debit, credit or virtual card on an active account.

    The card number and CVV are generated and stored encrypted; the
    expiration date is 4 years from now.
    """
    return await card_service.issue_card(
        db,
        customer,
        request.account_id,
        card_type=request.card_type,
        spending_limit_cents=request.spending_limit_cents,
        daily_limit_cents=request.daily_limit_cents,
    )


@router.get(
    "",
    response_model=list[CardResponse],
    summary="List my cards",
)
async def list_cards(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.list_cards(db, customer.id)


@router.get(
    "/{card_id}",
    response_model=CardResponse,
    summary="Get a card",
)
async def get_card(
    card_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.get_card(db, card_id, customer.id)


@router.patch(
    "/{card_id}/status",
    response_model=CardResponse,
    summary="Freeze, unfreeze or cancel a card",
)
async def update_card_status(
    card_id: uuid.UUID,
    request: CardStatusUpdateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """Cancelling is permanent: a cancelled card cannot be reactivated."""
    return await card_service.update_status(db, card_id, customer.id, request.status)


@router.patch(
    "/{card_id}/limits",
    response_model=CardResponse,
    summary="Update card limits",
)
async def update_card_limits(
    card_id: uuid.UUID,
    request: CardLimitsUpdateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.update_limits(
        db,
        card_id,
        customer.id,
        spending_limit_cents=request.spending_limit_cents,
        daily_limit_cents=request.daily_limit_cents,
    )


@router.post(
    "/{card_id}/purchases",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Make a card purchase",
)
async def make_purchase(
    card_id: uuid.UUID,
    request: CardPurchaseRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Charge a purchase to the card's account.

    Rejected when the card isn't active, the amount exceeds the spending
    limit, or today's purchases would exceed the daily limit. A purchase
    the balance can't cover is recorded as a declined transaction and
    answered with 422.
    """
    return await card_service.purchase(
        db, card_id, customer.id, request.amount_cents, request.merchant
    )
