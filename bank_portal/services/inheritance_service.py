"""
Inheritance service - claims on a deceased customer's estate.

Customers open a claim for a deceased customer identified by email and
attach supporting documents (as URLs). Admins may also open a process
directly by user id. Either way the estimated value is the deceased's
total balance across their active accounts at the time the process is
opened.

Reviews move the process along INHERITANCE_TRANSITIONS; every review is
audited and the initiator is notified.
"""

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import (
    BusinessRuleError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.account import Account, AccountStatus
from bank_portal.models.audit import AuditAction
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.inheritance import (
    INHERITANCE_TRANSITIONS,
    InheritanceDocument,
    InheritanceProcess,
    InheritanceStatus,
)
from bank_portal.models.notification import NotificationType
from bank_portal.models.user import User
from bank_portal.schemas.inheritance import (
    AdminInheritanceCreateRequest,
    InheritanceClaimRequest,
    InheritanceDocumentCreate,
    InheritanceReviewRequest,
)
from bank_portal.services import audit_service, notification_service

logger = structlog.get_logger()

_TERMINAL = {InheritanceStatus.REJECTED, InheritanceStatus.COMPLETED}


async def _estate_value(db: AsyncSession, deceased_user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(Account.cached_balance_cents), 0))
        .join(CustomerProfile, CustomerProfile.id == Account.customer_id)
        .where(CustomerProfile.user_id == deceased_user_id)
        .where(Account.status == AccountStatus.ACTIVE)
    )
    return result.scalar()


async def _open_process(
    db: AsyncSession,
    deceased: User,
    initiated_by: uuid.UUID,
    death_certificate_url: str | None,
    will_document_url: str | None = None,
    identification_url: str | None = None,
    probate_document_url: str | None = None,
    notes: str | None = None,
) -> InheritanceProcess:
    if deceased.id == initiated_by:
        raise BusinessRuleError("You cannot open an inheritance claim on your own estate")

    process = InheritanceProcess(
        deceased_user_id=deceased.id,
        initiated_by=initiated_by,
        death_certificate_url=death_certificate_url,
        will_document_url=will_document_url,
        identification_url=identification_url,
        probate_document_url=probate_document_url,
        notes=notes,
        estimated_value_cents=await _estate_value(db, deceased.id),
    )
    db.add(process)
    await db.flush()
    logger.info(
        "inheritance_opened",
        process_id=str(process.id),
        estimated_value_cents=process.estimated_value_cents,
    )
    return process


def _add_documents(
    db: AsyncSession,
    process: InheritanceProcess,
    uploaded_by: uuid.UUID,
    documents: list[InheritanceDocumentCreate],
) -> list[InheritanceDocument]:
    rows = [
        InheritanceDocument(
            process_id=process.id,
            document_type=doc.document_type,
            file_name=doc.file_name,
            file_url=doc.file_url,
            uploaded_by=uploaded_by,
        )
        for doc in documents
    ]
    db.add_all(rows)
    return rows


async def _documents(db: AsyncSession, process_id: uuid.UUID) -> list[InheritanceDocument]:
    result = await db.execute(
        select(InheritanceDocument)
        .where(InheritanceDocument.process_id == process_id)
        .order_by(InheritanceDocument.created_at)
    )
    return list(result.scalars().all())


def _detail(process: InheritanceProcess, documents: list[InheritanceDocument]) -> dict:
    detail = {
        column.key: getattr(process, column.key)
        for column in InheritanceProcess.__table__.columns
    }
    detail["documents"] = documents
    return detail


# ---------------------------------------------------------------------------
# Customer functions
# ---------------------------------------------------------------------------

async def create_claim(
    db: AsyncSession,
    user: User,
    request: InheritanceClaimRequest,
) -> dict:
    """
    Raises:
        ResourceNotFoundError: No user with the deceased's email.
        BusinessRuleError: The claimant named themselves.
    """
    result = await db.execute(select(User).where(User.email == request.deceased_email))
    deceased = result.scalar_one_or_none()
    if deceased is None:
        raise ResourceNotFoundError("Deceased customer")

    process = await _open_process(
        db,
        deceased,
        user.id,
        request.death_certificate_url,
        request.will_document_url,
        request.identification_url,
        request.probate_document_url,
        request.notes,
    )
    documents = _add_documents(db, process, user.id, request.documents)
    await db.flush()
    return _detail(process, documents)


async def list_claims(db: AsyncSession, user_id: uuid.UUID) -> list[InheritanceProcess]:
    result = await db.execute(
        select(InheritanceProcess)
        .where(InheritanceProcess.initiated_by == user_id)
        .order_by(InheritanceProcess.created_at.desc())
    )
    return list(result.scalars().all())


async def _get_process(db: AsyncSession, process_id: uuid.UUID) -> InheritanceProcess:
    process = await db.get(InheritanceProcess, process_id)
    if process is None:
        raise ResourceNotFoundError("Inheritance process", process_id)
    return process


async def add_document(
    db: AsyncSession,
    user: User,
    process_id: uuid.UUID,
    document: InheritanceDocumentCreate,
) -> InheritanceDocument:
    process = await _get_process(db, process_id)
    if process.initiated_by != user.id:
        raise UnauthorizedAccessError("You do not have access to this inheritance process")
    if process.status in _TERMINAL:
        raise InvalidStatusTransitionError("Inheritance process", process.status.value)

    (row,) = _add_documents(db, process, user.id, [document])
    await db.flush()
    return row


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def admin_create(
    db: AsyncSession,
    admin: User,
    request: AdminInheritanceCreateRequest,
) -> InheritanceProcess:
    deceased = await db.get(User, request.deceased_user_id)
    if deceased is None:
        raise ResourceNotFoundError("User", request.deceased_user_id)

    return await _open_process(
        db,
        deceased,
        admin.id,
        request.death_certificate_url,
        request.will_document_url,
        notes=request.notes,
    )


async def admin_list(
    db: AsyncSession,
    status_filter: InheritanceStatus | None = None,
) -> list[InheritanceProcess]:
    query = select(InheritanceProcess).order_by(InheritanceProcess.created_at.desc())
    if status_filter:
        query = query.where(InheritanceProcess.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


async def admin_get(db: AsyncSession, process_id: uuid.UUID) -> dict:
    process = await _get_process(db, process_id)
    return _detail(process, await _documents(db, process.id))


async def admin_review(
    db: AsyncSession,
    admin: User,
    process_id: uuid.UUID,
    request: InheritanceReviewRequest,
    client: ClientInfo | None = None,
) -> InheritanceProcess:
    """
    Move a process to a new status.

    Raises:
        ResourceNotFoundError: No such process.
        InvalidStatusTransitionError: The move is not an allowed edge.
        BusinessRuleError: Rejecting without a reason.
    """
    process = await _get_process(db, process_id)
    current = process.status

    if request.status not in INHERITANCE_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(
            "Inheritance process", current.value, request.status.value
        )
    if request.status == InheritanceStatus.REJECTED and not request.rejection_reason:
        raise BusinessRuleError("A rejection reason is required")

    process.status = request.status
    if request.notes is not None:
        process.notes = request.notes
    if request.status == InheritanceStatus.REJECTED:
        process.rejection_reason = request.rejection_reason
    process.processed_by = admin.id
    process.processed_at = datetime.now(timezone.utc)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.INHERITANCE_REVIEWED,
        target_user_id=process.deceased_user_id,
        details={
            "process_id": process.id,
            "previous_status": current.value,
            "new_status": request.status.value,
            "rejection_reason": process.rejection_reason,
        },
        client=client,
    )
    await notification_service.notify(
        db,
        process.initiated_by,
        NotificationType.ACCOUNT_UPDATE,
        "Inheritance claim updated",
        f"Your inheritance claim is now {request.status.value.replace('_', ' ')}.",
        metadata={"process_id": str(process.id)},
        created_by=admin.id,
    )
    return process
