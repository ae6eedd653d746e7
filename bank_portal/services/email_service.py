"""
Email service - renders and sends transactional email through Resend.

Delivery:
  Mail goes out through Resend's HTTP API (POST {RESEND_API_URL}/emails) with
  httpx. Without RESEND_API_KEY nothing is sent: the attempt is logged and
  recorded with status "not_configured", so local development and tests
  work offline. Provider errors are logged and recorded as "failed";
  they never fail the request that triggered the email.

Every attempt, whatever its outcome, writes an EmailNotification row.

Configuration per event:
  A NotificationSetting row for an event type can switch its email off or
  point it at an admin-managed EmailTemplate. Active templates are rendered
  with the event's variables ({{first_name}}, {{amount}}, ...) in place of
  the built-in body. Events without a setting row send the built-in body.
"""

import html
import re
import uuid

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.config import settings
from bank_portal.models.email import (
    EmailDeliveryStatus,
    EmailEventType,
    EmailNotification,
    EmailTemplate,
    NotificationSetting,
)
from bank_portal.models.user import User

logger = structlog.get_logger()

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def format_cents(amount_cents: int) -> str:
    """1234567 -> "$12,345.67"."""
    sign = "-" if amount_cents < 0 else ""
    dollars, cents = divmod(abs(amount_cents), 100)
    return f"{sign}${dollars:,}.{cents:02d}"


def extract_variables(content: str) -> list[str]:
    """Placeholder names in order of first appearance, without duplicates."""
    seen: list[str] = []
    for name in _PLACEHOLDER.findall(content):
        if name not in seen:
            seen.append(name)
    return seen


def render_template(content: str, variables: dict[str, str]) -> str:
    """Substitute {{name}} placeholders. Unknown placeholders are left as-is."""

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return _PLACEHOLDER.sub(_replace, content)


def _branded_html(title: str, paragraphs: list[str]) -> str:
    body = "".join(f"<p>{html.escape(p)}</p>" for p in paragraphs)
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"<div style=\"background: #1e3a8a; color: #ffffff; padding: 20px;\">"
        f"<h1 style=\"margin: 0;\">{html.escape(settings.BANK_NAME)}</h1></div>"
        f"<div style=\"padding: 20px;\"><h2>{html.escape(title)}</h2>{body}</div>"
        "<div style=\"padding: 20px; color: #6b7280; font-size: 12px;\">"
        "This is an automated message. Please do not reply to this email.</div>"
        "</div>"
    )


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------

async def _deliver(
    to_email: str,
    subject: str,
    html_body: str,
    text_body: str,
) -> tuple[EmailDeliveryStatus, str | None]:
    if not settings.RESEND_API_KEY:
        logger.info("email_skipped_not_configured", subject=subject)
        return EmailDeliveryStatus.NOT_CONFIGURED, None

    url = settings.RESEND_API_URL.rstrip("/") + "/emails"
    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "html": html_body,
        "text": text_body,
    }

    try:
        async with httpx.AsyncClient(timeout=settings.EMAIL_TIMEOUT_SECONDS) as client:
            response = await client.post(url, headers=headers, json=payload)
    except httpx.HTTPError as exc:
        logger.warning("email_failed", subject=subject, error=str(exc))
        return EmailDeliveryStatus.FAILED, str(exc)[:500]

    if response.status_code >= 400:
        logger.warning(
            "email_failed",
            subject=subject,
            status_code=response.status_code,
            body=response.text[:500],
        )
        return EmailDeliveryStatus.FAILED, f"HTTP {response.status_code}"

    logger.info("email_sent", subject=subject)
    return EmailDeliveryStatus.SENT, None


async def send_email(
    db: AsyncSession,
    *,
    to_email: str,
    subject: str,
    html_body: str,
    text_body: str,
    event_type: EmailEventType,
    user_id: uuid.UUID | None = None,
    metadata: dict | None = None,
) -> bool:
    """Send one email and record the attempt. Returns True only if delivered."""
    status, error = await _deliver(to_email, subject, html_body, text_body)

    db.add(
        EmailNotification(
            user_id=user_id,
            to_email=to_email,
            subject=subject[:200],
            body=text_body,
            event_type=event_type,
            status=status,
            error=error,
            extra=metadata,
        )
    )
    await db.flush()
    return status == EmailDeliveryStatus.SENT


async def get_setting(
    db: AsyncSession,
    event_type: EmailEventType,
) -> NotificationSetting | None:
    result = await db.execute(
        select(NotificationSetting).where(NotificationSetting.event_type == event_type)
    )
    return result.scalar_one_or_none()


async def send_event_email(
    db: AsyncSession,
    event_type: EmailEventType,
    user: User,
    title: str,
    paragraphs: list[str],
    variables: dict[str, str],
    subject: str | None = None,
) -> bool:
    """
    Send the email for a system event, honoring its NotificationSetting.

    Args:
        title / paragraphs: the built-in body.
        variables: values for a configured template's placeholders.
        subject: built-in subject; defaults to the title.
    """
    setting = await get_setting(db, event_type)

    if setting is not None and not setting.email_enabled:
        logger.info("email_disabled_for_event", event_type=event_type.value)
        db.add(
            EmailNotification(
                user_id=user.id,
                to_email=user.email,
                subject=(subject or title)[:200],
                body="",
                event_type=event_type,
                status=EmailDeliveryStatus.DISABLED,
            )
        )
        await db.flush()
        return False

    template = None
    if setting is not None and setting.template_id is not None:
        template = await db.get(EmailTemplate, setting.template_id)

    if template is not None and template.is_active:
        rendered_subject = render_template(template.subject, variables)
        html_body = render_template(template.html_content, variables)
        text_body = (
            render_template(template.text_content, variables)
            if template.text_content
            else re.sub(r"<[^>]+>", "", html_body)
        )
    else:
        rendered_subject = subject or title
        html_body = _branded_html(title, paragraphs)
        text_body = "\n\n".join([title, *paragraphs])

    return await send_email(
        db,
        to_email=user.email,
        subject=rendered_subject,
        html_body=html_body,
        text_body=text_body,
        event_type=event_type,
        user_id=user.id,
        metadata={"template_id": str(template.id)} if template is not None else None,
    )


# ---------------------------------------------------------------------------
# Event emails
# ---------------------------------------------------------------------------

async def send_account_created_email(
    db: AsyncSession,
    user: User,
    first_name: str,
    account_number: str,
    account_type: str,
) -> bool:
    masked = f"****{account_number[-4:]}"
    return await send_event_email(
        db,
        EmailEventType.ACCOUNT_CREATED,
        user,
        title=f"Welcome to {settings.BANK_NAME}",
        paragraphs=[
            f"Hello {first_name},",
            f"Your new {account_type} account {masked} is open and ready to use.",
            f"Routing number: {settings.ROUTING_NUMBER}.",
        ],
        variables={
            "first_name": first_name,
            "account_number": masked,
            "account_type": account_type,
            "routing_number": settings.ROUTING_NUMBER,
            "bank_name": settings.BANK_NAME,
        },
    )


async def send_transfer_status_email(
    db: AsyncSession,
    user: User,
    first_name: str,
    transfer_id: uuid.UUID,
    amount_cents: int,
    recipient_name: str,
    status: str,
    reason: str | None = None,
) -> bool:
    messages = {
        "verification_required": "has been received and is awaiting review",
        "completed": "has been approved and completed",
        "rejected": "has been rejected",
        "failed": "could not be completed",
    }
    paragraphs = [
        f"Hello {first_name},",
        f"Your transfer of {format_cents(amount_cents)} to {recipient_name} "
        f"{messages.get(status, 'was updated')}.",
    ]
    if reason:
        paragraphs.append(f"Reason: {reason}")
    return await send_event_email(
        db,
        EmailEventType.TRANSFER_STATUS,
        user,
        title=f"Transfer {status.replace('_', ' ')}",
        paragraphs=paragraphs,
        variables={
            "first_name": first_name,
            "amount": format_cents(amount_cents),
            "recipient_name": recipient_name,
            "status": status,
            "reason": reason or "",
            "transfer_id": str(transfer_id),
        },
    )


async def send_balance_change_email(
    db: AsyncSession,
    user: User,
    first_name: str,
    account_number: str,
    direction: str,
    amount_cents: int,
    new_balance_cents: int,
    description: str,
) -> bool:
    masked = f"****{account_number[-4:]}"
    verb = "credited to" if direction == "credit" else "debited from"
    return await send_event_email(
        db,
        EmailEventType.BALANCE_CHANGE,
        user,
        title="Account balance update",
        paragraphs=[
            f"Hello {first_name},",
            f"{format_cents(amount_cents)} was {verb} your account {masked}.",
            f"Description: {description}",
            f"New balance: {format_cents(new_balance_cents)}",
        ],
        variables={
            "first_name": first_name,
            "account_number": masked,
            "direction": direction,
            "amount": format_cents(amount_cents),
            "new_balance": format_cents(new_balance_cents),
            "description": description,
        },
    )


async def send_account_status_email(
    db: AsyncSession,
    user: User,
    first_name: str,
    account_number: str,
    status: str,
    reason: str,
) -> bool:
    masked = f"****{account_number[-4:]}"
    return await send_event_email(
        db,
        EmailEventType.ACCOUNT_STATUS,
        user,
        title=f"Account {status}",
        paragraphs=[
            f"Hello {first_name},",
            f"The status of your account {masked} is now: {status}.",
            f"Reason: {reason}",
            "Please contact support if you have any questions.",
        ],
        variables={
            "first_name": first_name,
            "account_number": masked,
            "status": status,
            "reason": reason,
        },
    )


async def send_password_reset_email(
    db: AsyncSession,
    user: User,
    first_name: str,
    reset_link: str,
) -> bool:
    minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
    return await send_event_email(
        db,
        EmailEventType.PASSWORD_RESET,
        user,
        title="Reset your password",
        paragraphs=[
            f"Hello {first_name},",
            "We received a request to reset your password.",
            f"Use this link within {minutes} minutes: {reset_link}",
            "If you did not request this, you can ignore this email.",
        ],
        variables={
            "first_name": first_name,
            "reset_link": reset_link,
            "expires_minutes": str(minutes),
        },
    )


async def send_custom_email(
    db: AsyncSession,
    user: User,
    subject: str,
    message: str,
) -> bool:
    """Admin-authored message; bypasses per-event configuration."""
    return await send_email(
        db,
        to_email=user.email,
        subject=subject,
        html_body=_branded_html(subject, message.split("\n\n")),
        text_body=message,
        event_type=EmailEventType.CUSTOM,
        user_id=user.id,
    )
