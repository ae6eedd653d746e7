"""
Beneficiary service.

The active beneficiaries of a customer may share at most 100% of the
estate between them. Deleting a beneficiary deactivates it, which frees
its share.
"""

import uuid
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.exceptions import (
    BusinessRuleError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.beneficiary import Beneficiary
from bank_portal.schemas.beneficiary import BeneficiaryCreateRequest, BeneficiaryUpdateRequest

MAX_TOTAL_PERCENTAGE = Decimal("100")


async def _allocated(
    db: AsyncSession,
    customer_id: uuid.UUID,
    exclude_id: uuid.UUID | None = None,
) -> Decimal:
    query = (
        select(func.coalesce(func.sum(Beneficiary.percentage), 0))
        .where(Beneficiary.customer_id == customer_id)
        .where(Beneficiary.is_active.is_(True))
    )
    if exclude_id is not None:
        query = query.where(Beneficiary.id != exclude_id)
    result = await db.execute(query)
    return Decimal(str(result.scalar()))


def _check_total(allocated: Decimal, requested: Decimal) -> None:
    if allocated + requested > MAX_TOTAL_PERCENTAGE:
        raise BusinessRuleError(
            f"Beneficiary percentages would total {allocated + requested}%; "
            f"the maximum is {MAX_TOTAL_PERCENTAGE}%"
        )


async def list_beneficiaries(db: AsyncSession, customer_id: uuid.UUID) -> list[Beneficiary]:
    result = await db.execute(
        select(Beneficiary)
        .where(Beneficiary.customer_id == customer_id)
        .where(Beneficiary.is_active.is_(True))
        .order_by(Beneficiary.created_at)
    )
    return list(result.scalars().all())


async def add_beneficiary(
    db: AsyncSession,
    customer_id: uuid.UUID,
    request: BeneficiaryCreateRequest,
) -> Beneficiary:
    _check_total(await _allocated(db, customer_id), request.percentage)

    beneficiary = Beneficiary(
        customer_id=customer_id,
        name=request.name,
        relationship_type=request.relationship,
        percentage=request.percentage,
        contact_info=request.contact_info,
        date_of_birth=request.date_of_birth,
        address=request.address,
    )
    db.add(beneficiary)
    await db.flush()
    return beneficiary


async def _get_own(
    db: AsyncSession,
    beneficiary_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> Beneficiary:
    beneficiary = await db.get(Beneficiary, beneficiary_id)
    if beneficiary is None or not beneficiary.is_active:
        raise ResourceNotFoundError("Beneficiary", beneficiary_id)
    if beneficiary.customer_id != customer_id:
        raise UnauthorizedAccessError("You do not have access to this beneficiary")
    return beneficiary


async def update_beneficiary(
    db: AsyncSession,
    beneficiary_id: uuid.UUID,
    customer_id: uuid.UUID,
    request: BeneficiaryUpdateRequest,
) -> Beneficiary:
    beneficiary = await _get_own(db, beneficiary_id, customer_id)

    if request.percentage is not None:
        _check_total(
            await _allocated(db, customer_id, exclude_id=beneficiary.id),
            request.percentage,
        )
        beneficiary.percentage = request.percentage
    if request.name is not None:
        beneficiary.name = request.name
    if request.relationship is not None:
        beneficiary.relationship_type = request.relationship
    if request.contact_info is not None:
        beneficiary.contact_info = request.contact_info
    if request.address is not None:
        beneficiary.address = request.address

    await db.flush()
    return beneficiary


async def remove_beneficiary(
    db: AsyncSession,
    beneficiary_id: uuid.UUID,
    customer_id: uuid.UUID,
) -> None:
    beneficiary = await _get_own(db, beneficiary_id, customer_id)
    beneficiary.is_active = False
    await db.flush()
