"""
Savings service - savings goals and standing orders.

Contributing to a goal debits the linked account (a ledger row with the
goal's name) and raises the goal's current amount. Standing orders are
stored recurring-transfer templates; deactivating one stops it.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.exceptions import (
    BusinessRuleError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.savings import SavingsGoal, StandingOrder
from bank_portal.schemas.savings import SavingsGoalCreateRequest, StandingOrderCreateRequest
from bank_portal.services import account_service, transaction_service

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Savings goals
# ---------------------------------------------------------------------------

async def create_goal(
    db: AsyncSession,
    customer: CustomerProfile,
    request: SavingsGoalCreateRequest,
) -> SavingsGoal:
    account = await account_service.get_account(db, request.account_id, customer.id)
    transaction_service.ensure_active(account)

    goal = SavingsGoal(
        customer_id=customer.id,
        account_id=account.id,
        name=request.name,
        target_amount_cents=request.target_amount_cents,
        target_date=request.target_date,
        auto_deposit=request.auto_deposit,
        deposit_amount_cents=request.deposit_amount_cents,
        deposit_frequency=request.deposit_frequency,
    )
    db.add(goal)
    await db.flush()
    logger.info("savings_goal_created", goal_id=str(goal.id))
    return goal


async def list_goals(db: AsyncSession, customer_id: uuid.UUID) -> list[SavingsGoal]:
    result = await db.execute(
        select(SavingsGoal)
        .where(SavingsGoal.customer_id == customer_id)
        .order_by(SavingsGoal.created_at)
    )
    return list(result.scalars().all())


async def get_goal(
    db: AsyncSession,
    goal_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> SavingsGoal:
    goal = await db.get(SavingsGoal, goal_id)
    if goal is None:
        raise ResourceNotFoundError("Savings goal", goal_id)
    if goal.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this savings goal")
    return goal


async def contribute(
    db: AsyncSession,
    goal_id: uuid.UUID,
    customer_id: uuid.UUID,
    amount_cents: int,
) -> SavingsGoal:
    """
    Move money from the goal's linked account into the goal.

    Raises:
        BusinessRuleError: The goal has been deactivated.
        AccountNotActiveError, InsufficientFundsError: from the debit.
    """
    goal = await get_goal(db, goal_id, customer_id)
    if not goal.is_active:
        raise BusinessRuleError("Savings goal is no longer active")

    account = await transaction_service.lock_account(db, goal.account_id)
    await transaction_service.debit_account(
        db,
        account,
        amount_cents,
        description=f"Savings goal: {goal.name}",
    )
    goal.current_amount_cents += amount_cents
    await db.flush()

    logger.info(
        "savings_contribution",
        goal_id=str(goal.id),
        amount_cents=amount_cents,
        current_amount_cents=goal.current_amount_cents,
    )
    return goal


async def deactivate_goal(
    db: AsyncSession,
    goal_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> SavingsGoal:
    goal = await get_goal(db, goal_id, customer_id)
    goal.is_active = False
    await db.flush()
    return goal


# ---------------------------------------------------------------------------
# Standing orders
# ---------------------------------------------------------------------------

async def create_standing_order(
    db: AsyncSession,
    customer: CustomerProfile,
    request: StandingOrderCreateRequest,
) -> StandingOrder:
    account = await account_service.get_account(db, request.from_account_id, customer.id)
    transaction_service.ensure_active(account)

    if request.to_account_number == account.account_number:
        raise BusinessRuleError("A standing order cannot pay into its own source account")

    order = StandingOrder(
        customer_id=customer.id,
        from_account_id=account.id,
        to_account_number=request.to_account_number,
        to_account_holder_name=request.to_account_holder_name,
        amount_cents=request.amount_cents,
        frequency=request.frequency,
        next_payment_date=request.next_payment_date,
        end_date=request.end_date,
        description=request.description,
    )
    db.add(order)
    await db.flush()
    logger.info(
        "standing_order_created",
        standing_order_id=str(order.id),
        frequency=order.frequency.value,
    )
    return order


async def list_standing_orders(db: AsyncSession, customer_id: uuid.UUID) -> list[StandingOrder]:
    result = await db.execute(
        select(StandingOrder)
        .where(StandingOrder.customer_id == customer_id)
        .order_by(StandingOrder.created_at)
    )
    return list(result.scalars().all())


async def deactivate_standing_order(
    db: AsyncSession,
    order_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> StandingOrder:
    order = await db.get(StandingOrder, order_id)
    if order is None:
        raise ResourceNotFoundError("Standing order", order_id)
    if order.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this standing order")

    order.is_active = False
    await db.flush()
    return order
