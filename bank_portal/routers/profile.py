"""
Profile router - the authenticated customer's own profile.

Endpoints:
  GET   /profile - Get profile (SSN shown as last four digits only)
  PATCH /profile - Update personal, address and employment details

Email is changed by an admin, not here. KYC status fields are read-only.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.profile import ProfileResponse, ProfileUpdateRequest
from bank_portal.services import profile_service

router = APIRouter()


@router.get(
    "",
    response_model=ProfileResponse,
    summary="Get my profile",
)
async def get_profile(
    customer: CustomerProfile = Depends(get_current_customer),
):
    return customer


@router.patch(
    "",
    response_model=ProfileResponse,
    summary="Update my profile",
)
async def update_profile(
    request: ProfileUpdateRequest,
    customer: CustomerProfile = Depends(get_current_customer),
    db: AsyncSession = Depends(get_db),
):
    """
    Only fields present in the request body are updated.

    - **ssn**: stored encrypted; responses only ever show the last four digits
    - **annual_income_cents**: integer cents
    """
    return await profile_service.update_profile(db, customer, request)
