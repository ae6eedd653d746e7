"""
Notification service - in-app notifications.

Workflows call notify() to leave a message in a user's portal inbox.
When an email event type is passed, the event's NotificationSetting can
switch the in-app copy off.

Admin functions (prefixed `admin_`) send to one user, a list of users, or
every active customer.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import ResourceNotFoundError
from bank_portal.models.audit import AuditAction
from bank_portal.models.email import EmailEventType
from bank_portal.models.notification import Notification, NotificationStatus, NotificationType
from bank_portal.models.user import User, UserRole
from bank_portal.services import audit_service, email_service


async def notify(
    db: AsyncSession,
    user_id: uuid.UUID,
    type: NotificationType,
    title: str,
    message: str,
    metadata: dict | None = None,
    event_type: EmailEventType | None = None,
    created_by: uuid.UUID | None = None,
) -> Notification | None:
    """Create an unread notification. Returns None if the event has in-app switched off."""
    if event_type is not None:
        setting = await email_service.get_setting(db, event_type)
        if setting is not None and not setting.in_app_enabled:
            return None

    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        extra=metadata,
        created_by=created_by,
    )
    db.add(notification)
    await db.flush()
    return notification


async def list_notifications(
    db: AsyncSession,
    user_id: uuid.UUID,
    status_filter: NotificationStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Notification]:
    query = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if status_filter:
        query = query.where(Notification.status == status_filter)
    result = await db.execute(query)
    return list(result.scalars().all())


async def unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Notification.id))
        .where(Notification.user_id == user_id)
        .where(Notification.status == NotificationStatus.UNREAD)
    )
    return result.scalar()


async def _get_own(db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
    notification = await db.get(Notification, notification_id)
    # Another user's notification is reported as missing
    if notification is None or notification.user_id != user_id:
        raise ResourceNotFoundError("Notification", notification_id)
    return notification


async def mark_read(db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
    notification = await _get_own(db, notification_id, user_id)
    if notification.status == NotificationStatus.UNREAD:
        notification.status = NotificationStatus.READ
        notification.read_at = datetime.now(timezone.utc)
        await db.flush()
    return notification


async def mark_all_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Returns how many notifications changed."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.status == NotificationStatus.UNREAD)
        .values(status=NotificationStatus.READ, read_at=datetime.now(timezone.utc))
    )
    return result.rowcount


async def delete_notification(db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> None:
    notification = await _get_own(db, notification_id, user_id)
    await db.delete(notification)
    await db.flush()


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

async def admin_send(
    db: AsyncSession,
    admin_id: uuid.UUID,
    user_ids: list[uuid.UUID],
    type: NotificationType,
    title: str,
    message: str,
    client: ClientInfo | None = None,
) -> int:
    """Send to each existing user in `user_ids`; unknown ids are skipped. Audited."""
    result = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    existing = list(result.scalars().all())
    for user_id in existing:
        db.add(
            Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                created_by=admin_id,
            )
        )
    await db.flush()

    await audit_service.record(
        db,
        admin_id,
        AuditAction.NOTIFICATION_SENT,
        target_user_id=existing[0] if len(user_ids) == 1 and existing else None,
        details={"title": title, "type": type.value, "sent_count": len(existing)},
        client=client,
    )
    return len(existing)


async def admin_send_to_all(
    db: AsyncSession,
    admin_id: uuid.UUID,
    type: NotificationType,
    title: str,
    message: str,
    client: ClientInfo | None = None,
) -> int:
    result = await db.execute(
        select(User.id)
        .where(User.role == UserRole.CUSTOMER)
        .where(User.is_active.is_(True))
    )
    user_ids = list(result.scalars().all())
    return await admin_send(db, admin_id, user_ids, type, title, message, client)
