"""
Bill payment service.

A bill with no due date, or one due today or earlier, is paid immediately:
the account is debited and the bill gets a payment reference. A bill due
in the future is only checked against the current balance and stored
PENDING; it can be cancelled until it is paid.
"""

import secrets
import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.exceptions import (
    InsufficientFundsError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.bill_payment import BillPayment, BillPaymentStatus
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.notification import NotificationType
from bank_portal.schemas.bill_payment import BillPaymentCreateRequest
from bank_portal.services import account_service, email_service, notification_service, transaction_service

logger = structlog.get_logger()


def _generate_reference() -> str:
    return "BP" + secrets.token_hex(5).upper()


async def create_bill_payment(
    db: AsyncSession,
    customer: CustomerProfile,
    request: BillPaymentCreateRequest,
) -> BillPayment:
    account = await account_service.get_account(db, request.account_id, customer.id)
    transaction_service.ensure_active(account)

    if account.cached_balance_cents < request.amount_cents:
        raise InsufficientFundsError(
            account_id=account.id,
            requested_cents=request.amount_cents,
            available_cents=account.cached_balance_cents,
        )

    bill = BillPayment(
        customer_id=customer.id,
        account_id=account.id,
        bill_type=request.bill_type,
        biller_name=request.biller_name,
        biller_account_number=request.biller_account_number,
        amount_cents=request.amount_cents,
        due_date=request.due_date,
        is_recurring=request.is_recurring,
        recurring_frequency=request.recurring_frequency.value if request.recurring_frequency else None,
        status=BillPaymentStatus.PENDING,
    )
    db.add(bill)
    await db.flush()

    today = datetime.now(timezone.utc).date()
    if request.due_date is None or request.due_date <= today:
        await _pay(db, bill)

    logger.info(
        "bill_payment_created",
        bill_payment_id=str(bill.id),
        status=bill.status.value,
        amount_cents=bill.amount_cents,
    )
    return bill


async def _pay(db: AsyncSession, bill: BillPayment) -> None:
    account = await transaction_service.lock_account(db, bill.account_id)
    await transaction_service.debit_account(
        db,
        account,
        bill.amount_cents,
        description=f"Bill payment to {bill.biller_name}",
    )
    bill.status = BillPaymentStatus.PAID
    bill.reference = _generate_reference()
    bill.paid_at = datetime.now(timezone.utc)
    await db.flush()

    user, _ = await account_service.get_account_owner(db, account)
    await notification_service.notify(
        db,
        user.id,
        NotificationType.BILL_PAYMENT,
        "Bill paid",
        f"{email_service.format_cents(bill.amount_cents)} paid to {bill.biller_name} "
        f"(reference {bill.reference}).",
        metadata={"bill_payment_id": str(bill.id)},
    )


async def list_bill_payments(db: AsyncSession, customer_id: uuid.UUID) -> list[BillPayment]:
    result = await db.execute(
        select(BillPayment)
        .where(BillPayment.customer_id == customer_id)
        .order_by(BillPayment.created_at.desc())
    )
    return list(result.scalars().all())


async def cancel_bill_payment(
    db: AsyncSession,
    bill_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> BillPayment:
    """Only PENDING bills can be cancelled."""
    bill = await db.get(BillPayment, bill_id)
    if bill is None:
        raise ResourceNotFoundError("Bill payment", bill_id)
    if bill.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this bill payment")
    if bill.status != BillPaymentStatus.PENDING:
        raise InvalidStatusTransitionError(
            "Bill payment", bill.status.value, BillPaymentStatus.CANCELLED.value
        )

    bill.status = BillPaymentStatus.CANCELLED
    await db.flush()
    return bill
