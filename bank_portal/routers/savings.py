"""
Savings router - savings goals and standing orders.

Endpoints:
  POST   /savings-goals                     - Create a goal on one of my accounts
  GET    /savings-goals                     - List my goals
  POST   /savings-goals/{id}/contributions  - Move money from the account into the goal
  DELETE /savings-goals/{id}                - Deactivate a goal
  POST   /standing-orders                   - Create a standing order
  GET    /standing-orders                   - List my standing orders
  DELETE /standing-orders/{id}              - Deactivate a standing order
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.savings import (
    SavingsContributionRequest,
    SavingsGoalCreateRequest,
    SavingsGoalResponse,
    StandingOrderCreateRequest,
    StandingOrderResponse,
)
from bank_portal.services import savings_service

router = APIRouter()


# ---------------------------------------------------------------------------
# Savings goals
# ---------------------------------------------------------------------------

@router.post(
    "/savings-goals",
    response_model=SavingsGoalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a savings goal",
)
async def create_goal(
    request: SavingsGoalCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await savings_service.create_goal(db, customer, request)


@router.get(
    "/savings-goals",
    response_model=list[SavingsGoalResponse],
    summary="List my savings goals",
)
async def list_goals(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await savings_service.list_goals(db, customer.id)


@router.post(
    "/savings-goals/{goal_id}/contributions",
    response_model=SavingsGoalResponse,
    summary="Contribute to a savings goal",
)
async def contribute(
    goal_id: uuid.UUID,
    request: SavingsContributionRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """Debits the goal's linked account and raises the goal's current amount."""
    return await savings_service.contribute(db, goal_id, customer.id, request.amount_cents)


@router.delete(
    "/savings-goals/{goal_id}",
    response_model=SavingsGoalResponse,
    summary="Deactivate a savings goal",
)
async def deactivate_goal(
    goal_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await savings_service.deactivate_goal(db, goal_id, customer.id)


# ---------------------------------------------------------------------------
# Standing orders
# ---------------------------------------------------------------------------

@router.post(
    "/standing-orders",
    response_model=StandingOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a standing order",
)
async def create_standing_order(
    request: StandingOrderCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await savings_service.create_standing_order(db, customer, request)


@router.get(
    "/standing-orders",
    response_model=list[StandingOrderResponse],
    summary="List my standing orders",
)
async def list_standing_orders(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await savings_service.list_standing_orders(db, customer.id)


@router.delete(
    "/standing-orders/{order_id}",
    response_model=StandingOrderResponse,
    summary="Deactivate a standing order",
)
async def deactivate_standing_order(
    order_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await savings_service.deactivate_standing_order(db, order_id, customer.id)
