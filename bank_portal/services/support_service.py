"""
Support service - customer tickets and the chat thread on each ticket.

Customers see and post to their own tickets only. Admins see every ticket.
Posting to a CLOSED ticket is rejected for both sides. The first admin
reply on an OPEN ticket moves it to IN_PROGRESS, and every admin reply
leaves an admin_response notification for the customer.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import (
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from bank_portal.models.audit import AuditAction
from bank_portal.models.notification import NotificationType
from bank_portal.models.support import ChatMessage, SupportTicket, TicketStatus
from bank_portal.models.user import User
from bank_portal.schemas.support import TicketCreateRequest, TicketUpdateRequest
from bank_portal.services import audit_service, notification_service

logger = structlog.get_logger()


async def create_ticket(
    db: AsyncSession,
    user: User,
    request: TicketCreateRequest,
) -> SupportTicket:
    ticket = SupportTicket(
        user_id=user.id,
        subject=request.subject,
        description=request.description,
        category=request.category,
        priority=request.priority,
    )
    db.add(ticket)
    await db.flush()
    logger.info(
        "support_ticket_created",
        ticket_id=str(ticket.id),
        priority=ticket.priority.value,
    )
    return ticket


async def list_tickets(db: AsyncSession, user_id: uuid.UUID) -> list[SupportTicket]:
    result = await db.execute(
        select(SupportTicket)
        .where(SupportTicket.user_id == user_id)
        .order_by(SupportTicket.created_at.desc())
    )
    return list(result.scalars().all())


async def _get_ticket(db: AsyncSession, ticket_id: uuid.UUID) -> SupportTicket:
    ticket = await db.get(SupportTicket, ticket_id)
    if ticket is None:
        raise ResourceNotFoundError("Ticket", ticket_id)
    return ticket


async def get_ticket(
    db: AsyncSession,
    ticket_id: uuid.UUID,
    user_id: uuid.UUID,
) -> SupportTicket:
    ticket = await _get_ticket(db, ticket_id)
    if ticket.user_id != user_id:
        raise UnauthorizedAccessError("You do not have access to this ticket")
    return ticket


async def _messages(db: AsyncSession, ticket_id: uuid.UUID) -> list[ChatMessage]:
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.ticket_id == ticket_id)
        .order_by(ChatMessage.created_at.asc())
    )
    return list(result.scalars().all())


async def _post(
    db: AsyncSession,
    ticket: SupportTicket,
    sender_id: uuid.UUID,
    message: str,
    is_from_admin: bool,
) -> ChatMessage:
    if ticket.status == TicketStatus.CLOSED:
        raise InvalidStatusTransitionError("Ticket", ticket.status.value)

    chat_message = ChatMessage(
        ticket_id=ticket.id,
        sender_id=sender_id,
        message=message,
        is_from_admin=is_from_admin,
    )
    db.add(chat_message)
    await db.flush()
    return chat_message


async def list_messages(
    db: AsyncSession,
    ticket_id: uuid.UUID,
    user_id: uuid.UUID,
) -> list[ChatMessage]:
    ticket = await get_ticket(db, ticket_id, user_id)
    return await _messages(db, ticket.id)


async def post_message(
    db: AsyncSession,
    ticket_id: uuid.UUID,
    user_id: uuid.UUID,
    message: str,
) -> ChatMessage:
    ticket = await get_ticket(db, ticket_id, user_id)
    return await _post(db, ticket, user_id, message, is_from_admin=False)


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def admin_list_tickets(
    db: AsyncSession,
    status_filter: TicketStatus | None = None,
) -> list[SupportTicket]:
    query = select(SupportTicket).order_by(SupportTicket.created_at.desc())
    if status_filter:
        query = query.where(SupportTicket.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


async def admin_list_messages(db: AsyncSession, ticket_id: uuid.UUID) -> list[ChatMessage]:
    ticket = await _get_ticket(db, ticket_id)
    return await _messages(db, ticket.id)


async def admin_reply(
    db: AsyncSession,
    admin: User,
    ticket_id: uuid.UUID,
    message: str,
) -> ChatMessage:
    ticket = await _get_ticket(db, ticket_id)
    chat_message = await _post(db, ticket, admin.id, message, is_from_admin=True)

    if ticket.status == TicketStatus.OPEN:
        ticket.status = TicketStatus.IN_PROGRESS
        await db.flush()

    await notification_service.notify(
        db,
        ticket.user_id,
        NotificationType.ADMIN_RESPONSE,
        f"New reply: {ticket.subject}",
        message[:500],
        metadata={"ticket_id": str(ticket.id)},
        created_by=admin.id,
    )
    logger.info("support_reply", ticket_id=str(ticket.id), admin_id=str(admin.id))
    return chat_message


async def admin_update_ticket(
    db: AsyncSession,
    admin: User,
    ticket_id: uuid.UUID,
    request: TicketUpdateRequest,
    client: ClientInfo | None = None,
) -> SupportTicket:
    ticket = await _get_ticket(db, ticket_id)
    changes = request.model_dump(exclude_unset=True, exclude_none=True)

    for field, value in changes.items():
        setattr(ticket, field, value)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.TICKET_UPDATED,
        target_user_id=ticket.user_id,
        details={
            "ticket_id": ticket.id,
            "changes": request.model_dump(mode="json", exclude_unset=True, exclude_none=True),
        },
        client=client,
    )
    if "status" in changes:
        await notification_service.notify(
            db,
            ticket.user_id,
            NotificationType.ADMIN_RESPONSE,
            f"Ticket {ticket.status.value.replace('_', ' ')}",
            f"Your ticket \"{ticket.subject}\" is now {ticket.status.value.replace('_', ' ')}.",
            metadata={"ticket_id": str(ticket.id)},
            created_by=admin.id,
        )
    return ticket
