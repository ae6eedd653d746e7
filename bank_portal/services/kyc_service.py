"""
KYC service - identity verification submissions and their review.

A customer submits one verification per type. While a submission of that
type is PENDING or already VERIFIED a new one is refused; after a rejection
the customer may submit again.

Reviewing (admins only, PENDING rows only) recomputes the customer's
overall kyc_status:
  - rejected   if the latest submission of any type is rejected
  - completed  if both "id" and "address" are verified
  - pending    otherwise
An "id" review also sets the profile's id_verification_status.
"""

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import BusinessRuleError, InvalidStatusTransitionError, ResourceNotFoundError
from bank_portal.models.audit import AuditAction
from bank_portal.models.customer_profile import CustomerProfile, IdVerificationStatus, KycStatus
from bank_portal.models.kyc import KycVerification, VerificationStatus, VerificationType
from bank_portal.models.notification import NotificationType
from bank_portal.models.user import User
from bank_portal.services import audit_service, notification_service

logger = structlog.get_logger()

REQUIRED_FOR_COMPLETION = {VerificationType.ID, VerificationType.ADDRESS}


async def submit_verification(
    db: AsyncSession,
    user: User,
    verification_type: VerificationType,
    document_url: str | None = None,
) -> KycVerification:
    """
    Raises:
        InvalidStatusTransitionError: A submission of this type is already
            pending or verified.
    """
    result = await db.execute(
        select(KycVerification)
        .where(KycVerification.user_id == user.id)
        .where(KycVerification.verification_type == verification_type)
        .where(
            KycVerification.status.in_(
                (VerificationStatus.PENDING, VerificationStatus.VERIFIED)
            )
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        raise InvalidStatusTransitionError(
            f"{verification_type.value} verification", existing.status.value
        )

    verification = KycVerification(
        user_id=user.id,
        verification_type=verification_type,
        document_url=document_url,
    )
    db.add(verification)
    await db.flush()
    logger.info(
        "kyc_submitted",
        verification_id=str(verification.id),
        verification_type=verification_type.value,
    )
    return verification


async def list_verifications(db: AsyncSession, user_id: uuid.UUID) -> list[KycVerification]:
    result = await db.execute(
        select(KycVerification)
        .where(KycVerification.user_id == user_id)
        .order_by(KycVerification.created_at.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def admin_list_verifications(
    db: AsyncSession,
    status_filter: VerificationStatus | None = None,
) -> list[KycVerification]:
    query = select(KycVerification).order_by(KycVerification.created_at.asc())
    if status_filter:
        query = query.where(KycVerification.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


async def _recompute_kyc_status(db: AsyncSession, profile: CustomerProfile) -> None:
    result = await db.execute(
        select(KycVerification.verification_type, KycVerification.status)
        .where(KycVerification.user_id == profile.user_id)
        .order_by(KycVerification.created_at.asc())
    )
    # Latest submission per type wins; a resubmission replaces a rejection
    latest = {vtype: status for vtype, status in result.all()}

    verified = {vtype for vtype, status in latest.items() if status == VerificationStatus.VERIFIED}
    if VerificationStatus.REJECTED in latest.values():
        profile.kyc_status = KycStatus.REJECTED
    elif REQUIRED_FOR_COMPLETION <= verified:
        profile.kyc_status = KycStatus.COMPLETED
    else:
        profile.kyc_status = KycStatus.PENDING


async def admin_review(
    db: AsyncSession,
    admin: User,
    verification_id: uuid.UUID,
    new_status: VerificationStatus,
    rejection_reason: str | None = None,
    client: ClientInfo | None = None,
) -> KycVerification:
    """
    Raises:
        ResourceNotFoundError: No such verification.
        InvalidStatusTransitionError: The verification was already reviewed.
        BusinessRuleError: Rejecting without a reason.
    """
    verification = await db.get(KycVerification, verification_id)
    if verification is None:
        raise ResourceNotFoundError("KYC verification", verification_id)
    if verification.status != VerificationStatus.PENDING:
        raise InvalidStatusTransitionError(
            "KYC verification", verification.status.value, new_status.value
        )
    if new_status == VerificationStatus.REJECTED and not rejection_reason:
        raise BusinessRuleError("A rejection reason is required")

    verification.status = new_status
    verification.verified_by = admin.id
    verification.verified_at = datetime.now(timezone.utc)
    verification.rejection_reason = (
        rejection_reason if new_status == VerificationStatus.REJECTED else None
    )
    await db.flush()

    result = await db.execute(
        select(CustomerProfile).where(CustomerProfile.user_id == verification.user_id)
    )
    profile = result.scalar_one_or_none()
    if profile is not None:
        if verification.verification_type == VerificationType.ID:
            profile.id_verification_status = IdVerificationStatus(new_status.value)
        await _recompute_kyc_status(db, profile)
        await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.KYC_REVIEWED,
        target_user_id=verification.user_id,
        details={
            "verification_id": verification.id,
            "verification_type": verification.verification_type.value,
            "status": new_status.value,
            "rejection_reason": verification.rejection_reason,
        },
        client=client,
    )

    label = verification.verification_type.value
    if new_status == VerificationStatus.VERIFIED:
        message = f"Your {label} verification has been approved."
    else:
        message = f"Your {label} verification was rejected. Reason: {rejection_reason}"
    await notification_service.notify(
        db,
        verification.user_id,
        NotificationType.SECURITY,
        "Verification reviewed",
        message,
        metadata={"verification_id": str(verification.id)},
        created_by=admin.id,
    )
    return verification
