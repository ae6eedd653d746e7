"""
Audit service - records back-office actions.

record() is called by every admin workflow inside the same session as the
change it describes, so an action and its audit row commit together.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.models.audit import AuditAction, AuditLog

logger = structlog.get_logger()

MAX_AUDIT_ROWS = 1000


def _jsonable(details: dict | None) -> dict | None:
    if details is None:
        return None
    return {
        key: str(value) if isinstance(value, uuid.UUID) else value
        for key, value in details.items()
    }


async def record(
    db: AsyncSession,
    admin_id: uuid.UUID,
    action: AuditAction,
    target_user_id: uuid.UUID | None = None,
    details: dict | None = None,
    client: ClientInfo | None = None,
) -> AuditLog:
    entry = AuditLog(
        admin_id=admin_id,
        target_user_id=target_user_id,
        action=action,
        details=_jsonable(details),
        ip_address=client.ip_address if client else None,
        user_agent=client.user_agent if client else None,
    )
    db.add(entry)
    await db.flush()

    logger.info(
        "admin_action",
        action=action.value,
        admin_id=str(admin_id),
        target_user_id=str(target_user_id) if target_user_id else None,
    )
    return entry


async def list_logs(
    db: AsyncSession,
    action: AuditAction | None = None,
    limit: int = MAX_AUDIT_ROWS,
) -> list[AuditLog]:
    """Newest first, never more than MAX_AUDIT_ROWS."""
    query = (
        select(AuditLog)
        .order_by(AuditLog.created_at.desc())
        .limit(min(limit, MAX_AUDIT_ROWS))
    )
    if action:
        query = query.where(AuditLog.action == action)
    result = await db.execute(query)
    return list(result.scalars().all())
