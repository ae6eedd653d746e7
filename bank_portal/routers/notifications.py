"""
Notifications router - the authenticated user's in-app inbox.

Endpoints:
  GET    /notifications                - List (filter by status)
  GET    /notifications/unread-count   - Number of unread notifications
  PATCH  /notifications/{id}/read      - Mark one as read
  POST   /notifications/mark-all-read  - Mark all as read
  DELETE /notifications/{id}           - Delete one

Available to customers and admins alike.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_user
from bank_portal.models.notification import NotificationStatus
from bank_portal.models.user import User
from bank_portal.schemas.auth import MessageResponse
from bank_portal.schemas.notification import NotificationResponse, UnreadCountResponse
from bank_portal.services import notification_service

router = APIRouter()


@router.get(
    "",
    response_model=list[NotificationResponse],
    summary="List my notifications",
)
async def list_notifications(
    status: NotificationStatus | None = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_service.list_notifications(
        db, user.id, status_filter=status, limit=limit, offset=offset
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count unread notifications",
)
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UnreadCountResponse(unread_count=await notification_service.unread_count(db, user.id))


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification as read",
)
async def mark_read(
    notification_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_service.mark_read(db, notification_id, user.id)


@router.post(
    "/mark-all-read",
    response_model=MessageResponse,
    summary="Mark all notifications as read",
)
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await notification_service.mark_all_read(db, user.id)
    return MessageResponse(message=f"{count} notifications marked as read")


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await notification_service.delete_notification(db, notification_id, user.id)
