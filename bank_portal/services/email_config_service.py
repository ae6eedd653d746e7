"""
Email configuration service - admin management of email templates and of
the per-event notification settings.

Templates:
  Placeholders are written {{name}}. On every save the template's
  `variables` list is re-extracted from its subject, HTML and text bodies.
  A deleted template is first detached from any setting that used it.

Settings:
  One row per configurable event type, created on first update. Events
  without a row behave as if email and in-app are both enabled with the
  built-in body; list_settings reports those defaults.
"""

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.dependencies import ClientInfo
from bank_portal.exceptions import BusinessRuleError, ResourceNotFoundError
from bank_portal.models.audit import AuditAction
from bank_portal.models.email import EmailEventType, EmailTemplate, NotificationSetting
from bank_portal.models.user import User
from bank_portal.schemas.email import (
    EmailTemplateCreateRequest,
    EmailTemplateUpdateRequest,
    NotificationSettingUpdateRequest,
)
from bank_portal.services import audit_service, email_service

logger = structlog.get_logger()

CONFIGURABLE_EVENTS = [
    EmailEventType.ACCOUNT_CREATED,
    EmailEventType.TRANSFER_STATUS,
    EmailEventType.BALANCE_CHANGE,
    EmailEventType.ACCOUNT_STATUS,
    EmailEventType.PASSWORD_RESET,
]


def _template_variables(template: EmailTemplate) -> list[str]:
    return email_service.extract_variables(
        "\n".join([template.subject, template.html_content, template.text_content or ""])
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

async def list_templates(db: AsyncSession) -> list[EmailTemplate]:
    result = await db.execute(select(EmailTemplate).order_by(EmailTemplate.name))
    return list(result.scalars().all())


async def get_template(db: AsyncSession, template_id: uuid.UUID) -> EmailTemplate:
    template = await db.get(EmailTemplate, template_id)
    if template is None:
        raise ResourceNotFoundError("Email template", template_id)
    return template


async def _ensure_unique_name(
    db: AsyncSession,
    name: str,
    exclude_id: uuid.UUID | None = None,
) -> None:
    query = select(EmailTemplate.id).where(EmailTemplate.name == name)
    if exclude_id is not None:
        query = query.where(EmailTemplate.id != exclude_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise BusinessRuleError(f"An email template named '{name}' already exists")


async def create_template(
    db: AsyncSession,
    admin: User,
    request: EmailTemplateCreateRequest,
    client: ClientInfo | None = None,
) -> EmailTemplate:
    await _ensure_unique_name(db, request.name)

    template = EmailTemplate(**request.model_dump(), created_by=admin.id)
    template.variables = _template_variables(template)
    db.add(template)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.TEMPLATE_CHANGED,
        details={"template_id": template.id, "operation": "created", "name": template.name},
        client=client,
    )
    return template


async def update_template(
    db: AsyncSession,
    admin: User,
    template_id: uuid.UUID,
    request: EmailTemplateUpdateRequest,
    client: ClientInfo | None = None,
) -> EmailTemplate:
    template = await get_template(db, template_id)
    changes = request.model_dump(exclude_unset=True)

    if changes.get("name") is not None:
        await _ensure_unique_name(db, changes["name"], exclude_id=template.id)

    for field, value in changes.items():
        # text_content is the only field that may be cleared
        if value is None and field != "text_content":
            continue
        setattr(template, field, value)
    template.variables = _template_variables(template)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.TEMPLATE_CHANGED,
        details={"template_id": template.id, "operation": "updated", "fields": sorted(changes)},
        client=client,
    )
    return template


async def delete_template(
    db: AsyncSession,
    admin: User,
    template_id: uuid.UUID,
    client: ClientInfo | None = None,
) -> None:
    template = await get_template(db, template_id)

    await db.execute(
        update(NotificationSetting)
        .where(NotificationSetting.template_id == template.id)
        .values(template_id=None)
    )
    await db.delete(template)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.TEMPLATE_CHANGED,
        details={"template_id": template_id, "operation": "deleted", "name": template.name},
        client=client,
    )


async def preview_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    variables: dict[str, str],
) -> dict:
    template = await get_template(db, template_id)
    return {
        "subject": email_service.render_template(template.subject, variables),
        "html": email_service.render_template(template.html_content, variables),
        "text": (
            email_service.render_template(template.text_content, variables)
            if template.text_content
            else None
        ),
    }


# ---------------------------------------------------------------------------
# Notification settings
# ---------------------------------------------------------------------------

async def list_settings(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(NotificationSetting))
    rows = {row.event_type: row for row in result.scalars().all()}

    settings_list = []
    for event_type in CONFIGURABLE_EVENTS:
        row = rows.get(event_type)
        settings_list.append(
            {
                "event_type": event_type,
                "email_enabled": row.email_enabled if row else True,
                "in_app_enabled": row.in_app_enabled if row else True,
                "template_id": row.template_id if row else None,
            }
        )
    return settings_list


async def update_setting(
    db: AsyncSession,
    admin: User,
    event_type: EmailEventType,
    request: NotificationSettingUpdateRequest,
    client: ClientInfo | None = None,
) -> NotificationSetting:
    """
    Create or update the setting for one event type.

    Raises:
        BusinessRuleError: The event type is not configurable.
        ResourceNotFoundError: template_id names no template.
    """
    if event_type not in CONFIGURABLE_EVENTS:
        raise BusinessRuleError(f"Email for '{event_type.value}' is not configurable")

    if request.template_id is not None:
        await get_template(db, request.template_id)

    setting = await email_service.get_setting(db, event_type)
    if setting is None:
        setting = NotificationSetting(event_type=event_type, email_enabled=True, in_app_enabled=True)
        db.add(setting)

    if request.email_enabled is not None:
        setting.email_enabled = request.email_enabled
    if request.in_app_enabled is not None:
        setting.in_app_enabled = request.in_app_enabled
    if request.clear_template:
        setting.template_id = None
    elif request.template_id is not None:
        setting.template_id = request.template_id
    setting.updated_by = admin.id
    setting.updated_at = datetime.now(timezone.utc)
    await db.flush()

    await audit_service.record(
        db,
        admin.id,
        AuditAction.EMAIL_CONFIGURATION_CHANGED,
        details={
            "event_type": event_type.value,
            "email_enabled": setting.email_enabled,
            "in_app_enabled": setting.in_app_enabled,
            "template_id": str(setting.template_id) if setting.template_id else None,
        },
        client=client,
    )
    logger.info("email_configuration_changed", event_type=event_type.value)
    return setting
