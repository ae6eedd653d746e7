"""
KYC router - a customer's identity verification submissions.

Endpoints:
  POST /kyc/verifications - Submit a verification (id, ssn, address, email, phone)
  GET  /kyc/verifications - My submissions and their review outcome
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer, get_current_user
from bank_portal.models.user import User
from bank_portal.schemas.kyc import KycSubmitRequest, KycVerificationResponse
from bank_portal.services import kyc_service

router = APIRouter(dependencies=[Depends(get_current_customer)])


@router.post(
    "/verifications",
    response_model=KycVerificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a verification",
)
async def submit_verification(
    request: KycSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Refused with 409 while a submission of the same type is pending or verified."""
    return await kyc_service.submit_verification(
        db, user, request.verification_type, request.document_url
    )


@router.get(
    "/verifications",
    response_model=list[KycVerificationResponse],
    summary="List my verifications",
)
async def list_verifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await kyc_service.list_verifications(db, user.id)
