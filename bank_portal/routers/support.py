"""
Support router - a customer's tickets and the chat on each ticket.

Endpoints:
  GET  /support/tickets                 - My tickets
  POST /support/tickets                 - Open a ticket
  GET  /support/tickets/{id}/messages   - The ticket's chat thread
  POST /support/tickets/{id}/messages   - Post to the thread (not when closed)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_customer, get_current_user
from bank_portal.models.user import User
from bank_portal.rate_limit import rate_limit
from bank_portal.schemas.support import (
    ChatMessageCreateRequest,
    ChatMessageResponse,
    TicketCreateRequest,
    TicketResponse,
)
from bank_portal.services import support_service

# Admins answer tickets through /admin/support
router = APIRouter(dependencies=[Depends(get_current_customer)])


@router.get(
    "/tickets",
    response_model=list[TicketResponse],
    summary="List my support tickets",
)
async def list_tickets(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.list_tickets(db, user.id)


@router.post(
    "/tickets",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a support ticket",
    dependencies=[Depends(rate_limit(5))],
)
async def create_ticket(
    request: TicketCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.create_ticket(db, user, request)


@router.get(
    "/tickets/{ticket_id}/messages",
    response_model=list[ChatMessageResponse],
    summary="Get a ticket's messages",
)
async def list_messages(
    ticket_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.list_messages(db, ticket_id, user.id)


@router.post(
    "/tickets/{ticket_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a message on a ticket",
)
async def post_message(
    ticket_id: uuid.UUID,
    request: ChatMessageCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.post_message(db, ticket_id, user.id, request.message)
