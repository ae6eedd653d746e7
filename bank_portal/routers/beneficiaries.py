"""
Beneficiaries router.

Endpoints:
  GET    /beneficiaries       - My active beneficiaries
  POST   /beneficiaries       - Add a beneficiary
  PATCH  /beneficiaries/{id}  - Update a beneficiary
  DELETE /beneficiaries/{id}  - Remove (deactivate) a beneficiary

Active beneficiaries' percentages may total at most 100.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.beneficiary import (
    BeneficiaryCreateRequest,
    BeneficiaryResponse,
    BeneficiaryUpdateRequest,
)
from bank_portal.services import beneficiary_service

router = APIRouter()


@router.get(
    "",
    response_model=list[BeneficiaryResponse],
    summary="List my beneficiaries",
)
async def list_beneficiaries(
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await beneficiary_service.list_beneficiaries(db, customer.id)


@router.post(
    "",
    response_model=BeneficiaryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a beneficiary",
)
async def add_beneficiary(
    request: BeneficiaryCreateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await beneficiary_service.add_beneficiary(db, customer.id, request)


@router.patch(
    "/{beneficiary_id}",
    response_model=BeneficiaryResponse,
    summary="Update a beneficiary",
)
async def update_beneficiary(
    beneficiary_id: uuid.UUID,
    request: BeneficiaryUpdateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    return await beneficiary_service.update_beneficiary(db, beneficiary_id, customer.id, request)


@router.delete(
    "/{beneficiary_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a beneficiary",
)
async def remove_beneficiary(
    beneficiary_id: uuid.UUID,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    await beneficiary_service.remove_beneficiary(db, beneficiary_id, customer.id)
