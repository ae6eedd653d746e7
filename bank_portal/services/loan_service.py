"""
Loan service - applications and their review.

Approval fixes the rate and term and computes the monthly payment with the
standard amortization formula on the loan's principal:

    payment = P * r / (1 - (1 + r) ** -n)     r = annual_rate / 12 / 100

(a 0% loan is simply P / n). Disbursal and repayment happen outside this
service; remaining_balance_cents starts at the principal.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import InvalidStatusTransitionError, ResourceNotFoundError
from bank_portal.models.audit import AuditAction
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.loan import Loan, LoanStatus
from bank_portal.models.notification import NotificationType
from bank_portal.models.user import User
from bank_portal.schemas.loan import LoanApplicationRequest
from bank_portal.services import audit_service, email_service, notification_service

logger = structlog.get_logger()


def monthly_payment_cents(principal_cents: int, annual_rate: Decimal, term_months: int) -> int:
    principal = Decimal(principal_cents)
    if annual_rate == 0:
        payment = principal / term_months
    else:
        r = Decimal(annual_rate) / 100 / 12
        payment = principal * r / (1 - (1 + r) ** -term_months)
    return int(payment.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def apply(
    db: AsyncSession,
    customer: CustomerProfile,
    request: LoanApplicationRequest,
) -> Loan:
    loan = Loan(
        customer_id=customer.id,
        amount_cents=request.amount_cents,
        loan_type=request.loan_type,
        purpose=request.purpose,
        term_months=request.term_months,
    )
    db.add(loan)
    await db.flush()
    logger.info("loan_applied", loan_id=str(loan.id), amount_cents=loan.amount_cents)
    return loan


async def list_loans(db: AsyncSession, customer_id: uuid.UUID) -> list[Loan]:
    result = await db.execute(
        select(Loan)
        .where(Loan.customer_id == customer_id)
        .order_by(Loan.created_at.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def admin_list_pending(db: AsyncSession) -> list[Loan]:
    result = await db.execute(
        select(Loan)
        .where(Loan.status == LoanStatus.PENDING)
        .order_by(Loan.created_at.asc())
    )
    return list(result.scalars().all())


async def _get_pending(db: AsyncSession, loan_id: uuid.UUID, target: LoanStatus) -> Loan:
    loan = await db.get(Loan, loan_id)
    if loan is None:
        raise ResourceNotFoundError("Loan", loan_id)
    if loan.status != LoanStatus.PENDING:
        raise InvalidStatusTransitionError("Loan", loan.status.value, target.value)
    return loan


async def _borrower_user_id(db: AsyncSession, loan: Loan) -> uuid.UUID:
    result = await db.execute(
        select(CustomerProfile.user_id).where(CustomerProfile.id == loan.customer_id)
    )
    return result.scalar_one()


async def admin_approve(
    db: AsyncSession,
    admin: User,
    loan_id: uuid.UUID,
    interest_rate: Decimal,
    term_months: int,
    client: ClientInfo | None = None,
) -> Loan:
    loan = await _get_pending(db, loan_id, LoanStatus.APPROVED)

    loan.interest_rate = interest_rate
    loan.term_months = term_months
    loan.monthly_payment_cents = monthly_payment_cents(loan.amount_cents, interest_rate, term_months)
    loan.remaining_balance_cents = loan.amount_cents
    loan.status = LoanStatus.APPROVED
    loan.approved_by = admin.id
    loan.approved_at = datetime.now(timezone.utc)
    await db.flush()

    user_id = await _borrower_user_id(db, loan)
    await audit_service.record(
        db,
        admin.id,
        AuditAction.LOAN_REVIEWED,
        target_user_id=user_id,
        details={
            "loan_id": loan.id,
            "status": LoanStatus.APPROVED.value,
            "interest_rate": str(interest_rate),
            "term_months": term_months,
        },
        client=client,
    )
    await notification_service.notify(
        db,
        user_id,
        NotificationType.ACCOUNT_UPDATE,
        "Loan approved",
        f"Your {email_service.format_cents(loan.amount_cents)} {loan.loan_type} loan was approved. "
        f"Monthly payment: {email_service.format_cents(loan.monthly_payment_cents)}.",
        metadata={"loan_id": str(loan.id)},
        created_by=admin.id,
    )
    return loan


async def admin_reject(
    db: AsyncSession,
    admin: User,
    loan_id: uuid.UUID,
    reason: str,
    client: ClientInfo | None = None,
) -> Loan:
    loan = await _get_pending(db, loan_id, LoanStatus.REJECTED)

    loan.status = LoanStatus.REJECTED
    loan.rejection_reason = reason
    await db.flush()

    user_id = await _borrower_user_id(db, loan)
    await audit_service.record(
        db,
        admin.id,
        AuditAction.LOAN_REVIEWED,
        target_user_id=user_id,
        details={"loan_id": loan.id, "status": LoanStatus.REJECTED.value, "reason": reason},
        client=client,
    )
    await notification_service.notify(
        db,
        user_id,
        NotificationType.ACCOUNT_UPDATE,
        "Loan application declined",
        f"Your {loan.loan_type} loan application was declined. Reason: {reason}",
        metadata={"loan_id": str(loan.id)},
        created_by=admin.id,
    )
    return loan
