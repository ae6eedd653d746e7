"""
Inheritance router - customer-initiated claims on a deceased customer's estate.

Endpoints:
  POST /inheritance/processes                  - Open a claim
  GET  /inheritance/processes                  - Claims I opened
  POST /inheritance/processes/{id}/documents   - Attach a supporting document
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer, get_current_user
from bank_portal.models.user import User
from bank_portal.schemas.inheritance import (
    InheritanceClaimRequest,
    InheritanceDocumentCreate,
    InheritanceDocumentResponse,
    InheritanceProcessDetailResponse,
    InheritanceProcessResponse,
)
from bank_portal.services import inheritance_service

router = APIRouter(dependencies=[Depends(get_current_customer)])


@router.post(
    "/processes",
    response_model=InheritanceProcessDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open an inheritance claim",
)
async def create_claim(
    request: InheritanceClaimRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    The deceased is identified by **deceased_email**. The estimated value
    is their total active balance at the time the claim is opened.
    """
    return await inheritance_service.create_claim(db, user, request)


@router.get(
    "/processes",
    response_model=list[InheritanceProcessResponse],
    summary="List my inheritance claims",
)
async def list_claims(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await inheritance_service.list_claims(db, user.id)


@router.post(
    "/processes/{process_id}/documents",
    response_model=InheritanceDocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a document to a claim",
)
async def add_document(
    process_id: uuid.UUID,
    request: InheritanceDocumentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await inheritance_service.add_document(db, user, process_id, request)
