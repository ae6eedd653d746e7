"""
Admin workflow router - back-office queues and configuration.

All endpoints require the ADMIN role.

Endpoints:
  GET    /admin/support/tickets                      - Tickets (filter by status)
  GET    /admin/support/tickets/{id}/messages        - A ticket's thread
  POST   /admin/support/tickets/{id}/messages        - Reply to a customer
  PATCH  /admin/support/tickets/{id}                 - Status, priority, assignee, resolution

  GET    /admin/kyc/verifications                    - Verifications (filter by status)
  POST   /admin/kyc/verifications/{id}/review        - Verify or reject

  POST   /admin/inheritance/processes                - Open a process for a deceased user
  GET    /admin/inheritance/processes                - List processes
  GET    /admin/inheritance/processes/{id}           - Process with documents
  POST   /admin/inheritance/processes/{id}/review    - Move to the next status

  GET    /admin/loans/pending                        - Loans awaiting review
  POST   /admin/loans/{id}/approve                   - Approve with rate and term
  POST   /admin/loans/{id}/reject                    - Reject with a reason

  GET    /admin/email-templates                      - List templates
  POST   /admin/email-templates                      - Create a template
  GET    /admin/email-templates/{id}                 - Get a template
  PATCH  /admin/email-templates/{id}                 - Update a template
  DELETE /admin/email-templates/{id}                 - Delete a template
  POST   /admin/email-templates/{id}/preview         - Render with sample values
  GET    /admin/email-configuration                  - Per-event email / in-app settings
  PUT    /admin/email-configuration/{event_type}     - Change one event's settings

  POST   /admin/notifications/send                   - Notify one user
  POST   /admin/notifications/send-bulk              - Notify a list of users
  POST   /admin/notifications/send-to-all            - Notify every active customer
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import ClientInfo, get_client_info, require_admin
from bank_portal.models.email import EmailEventType
from bank_portal.models.inheritance import InheritanceStatus
from bank_portal.models.kyc import VerificationStatus
from bank_portal.models.support import TicketStatus
from bank_portal.models.user import User
from bank_portal.schemas.email import (
    EmailTemplateCreateRequest,
    EmailTemplateResponse,
    EmailTemplateUpdateRequest,
    NotificationSettingResponse,
    NotificationSettingUpdateRequest,
    TemplatePreviewRequest,
    TemplatePreviewResponse,
)
from bank_portal.schemas.inheritance import (
    AdminInheritanceCreateRequest,
    InheritanceProcessDetailResponse,
    InheritanceProcessResponse,
    InheritanceReviewRequest,
)
from bank_portal.schemas.kyc import KycReviewRequest, KycVerificationResponse
from bank_portal.schemas.loan import LoanApproveRequest, LoanRejectRequest, LoanResponse
from bank_portal.schemas.notification import (
    AdminBroadcastRequest,
    AdminBulkNotificationRequest,
    AdminNotificationRequest,
    SentCountResponse,
)
from bank_portal.schemas.support import (
    ChatMessageCreateRequest,
    ChatMessageResponse,
    TicketResponse,
    TicketUpdateRequest,
)
from bank_portal.services import (
    email_config_service,
    inheritance_service,
    kyc_service,
    loan_service,
    notification_service,
    support_service,
)

router = APIRouter(dependencies=[Depends(require_admin)])


# ---------------------------------------------------------------------------
# Support
# ---------------------------------------------------------------------------

@router.get(
    "/support/tickets",
    response_model=list[TicketResponse],
    summary="[Admin] List support tickets",
)
async def list_tickets(
    status: TicketStatus | None = Query(None, description="Filter by status"),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.admin_list_tickets(db, status_filter=status)


@router.get(
    "/support/tickets/{ticket_id}/messages",
    response_model=list[ChatMessageResponse],
    summary="[Admin] Get a ticket's messages",
)
async def list_ticket_messages(
    ticket_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await support_service.admin_list_messages(db, ticket_id)


@router.post(
    "/support/tickets/{ticket_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Reply on a ticket",
)
async def reply_to_ticket(
    ticket_id: uuid.UUID,
    request: ChatMessageCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """The first reply on an open ticket moves it to in_progress."""
    return await support_service.admin_reply(db, admin, ticket_id, request.message)


@router.patch(
    "/support/tickets/{ticket_id}",
    response_model=TicketResponse,
    summary="[Admin] Update a ticket",
)
async def update_ticket(
    ticket_id: uuid.UUID,
    request: TicketUpdateRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.admin_update_ticket(db, admin, ticket_id, request, client)


# ---------------------------------------------------------------------------
# KYC
# ---------------------------------------------------------------------------

@router.get(
    "/kyc/verifications",
    response_model=list[KycVerificationResponse],
    summary="[Admin] List KYC verifications",
)
async def list_verifications(
    status: VerificationStatus | None = Query(None, description="Filter by status"),
    db: AsyncSession = Depends(get_db),
):
    return await kyc_service.admin_list_verifications(db, status_filter=status)


@router.post(
    "/kyc/verifications/{verification_id}/review",
    response_model=KycVerificationResponse,
    summary="[Admin] Review a KYC verification",
)
async def review_verification(
    verification_id: uuid.UUID,
    request: KycReviewRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Only pending verifications can be reviewed; the customer's KYC status is recomputed."""
    return await kyc_service.admin_review(
        db,
        admin,
        verification_id,
        VerificationStatus(request.status),
        request.rejection_reason,
        client,
    )


# ---------------------------------------------------------------------------
# Inheritance
# ---------------------------------------------------------------------------

@router.post(
    "/inheritance/processes",
    response_model=InheritanceProcessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Open an inheritance process",
)
async def create_inheritance_process(
    request: AdminInheritanceCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await inheritance_service.admin_create(db, admin, request)


@router.get(
    "/inheritance/processes",
    response_model=list[InheritanceProcessResponse],
    summary="[Admin] List inheritance processes",
)
async def list_inheritance_processes(
    status: InheritanceStatus | None = Query(None, description="Filter by status"),
    db: AsyncSession = Depends(get_db),
):
    return await inheritance_service.admin_list(db, status_filter=status)


@router.get(
    "/inheritance/processes/{process_id}",
    response_model=InheritanceProcessDetailResponse,
    summary="[Admin] Get an inheritance process",
)
async def get_inheritance_process(
    process_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await inheritance_service.admin_get(db, process_id)


@router.post(
    "/inheritance/processes/{process_id}/review",
    response_model=InheritanceProcessResponse,
    summary="[Admin] Review an inheritance process",
)
async def review_inheritance_process(
    process_id: uuid.UUID,
    request: InheritanceReviewRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """
    Allowed moves: pending -> document_review | rejected;
    document_review -> legal_review | disputed | rejected;
    legal_review -> approved | disputed | rejected;
    disputed -> legal_review | rejected; approved -> completed.
    """
    return await inheritance_service.admin_review(db, admin, process_id, request, client)


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------

@router.get(
    "/loans/pending",
    response_model=list[LoanResponse],
    summary="[Admin] Loans awaiting review",
)
async def list_pending_loans(
    db: AsyncSession = Depends(get_db),
):
    return await loan_service.admin_list_pending(db)


@router.post(
    "/loans/{loan_id}/approve",
    response_model=LoanResponse,
    summary="[Admin] Approve a loan",
)
async def approve_loan(
    loan_id: uuid.UUID,
    request: LoanApproveRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    return await loan_service.admin_approve(
        db, admin, loan_id, request.interest_rate, request.term_months, client
    )


@router.post(
    "/loans/{loan_id}/reject",
    response_model=LoanResponse,
    summary="[Admin] Reject a loan",
)
async def reject_loan(
    loan_id: uuid.UUID,
    request: LoanRejectRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    return await loan_service.admin_reject(db, admin, loan_id, request.reason, client)


# ---------------------------------------------------------------------------
# Email templates and configuration
# ---------------------------------------------------------------------------

@router.get(
    "/email-templates",
    response_model=list[EmailTemplateResponse],
    summary="[Admin] List email templates",
)
async def list_templates(
    db: AsyncSession = Depends(get_db),
):
    return await email_config_service.list_templates(db)


@router.post(
    "/email-templates",
    response_model=EmailTemplateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Create an email template",
)
async def create_template(
    request: EmailTemplateCreateRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Placeholders are written `{{name}}`; `variables` is extracted on save."""
    return await email_config_service.create_template(db, admin, request, client)


@router.get(
    "/email-templates/{template_id}",
    response_model=EmailTemplateResponse,
    summary="[Admin] Get an email template",
)
async def get_template(
    template_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await email_config_service.get_template(db, template_id)


@router.patch(
    "/email-templates/{template_id}",
    response_model=EmailTemplateResponse,
    summary="[Admin] Update an email template",
)
async def update_template(
    template_id: uuid.UUID,
    request: EmailTemplateUpdateRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    return await email_config_service.update_template(db, admin, template_id, request, client)


@router.delete(
    "/email-templates/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="[Admin] Delete an email template",
)
async def delete_template(
    template_id: uuid.UUID,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    await email_config_service.delete_template(db, admin, template_id, client)


@router.post(
    "/email-templates/{template_id}/preview",
    response_model=TemplatePreviewResponse,
    summary="[Admin] Preview an email template",
)
async def preview_template(
    template_id: uuid.UUID,
    request: TemplatePreviewRequest,
    db: AsyncSession = Depends(get_db),
):
    return await email_config_service.preview_template(db, template_id, request.variables)


@router.get(
    "/email-configuration",
    response_model=list[NotificationSettingResponse],
    summary="[Admin] Get email configuration",
)
async def list_email_configuration(
    db: AsyncSession = Depends(get_db),
):
    return await email_config_service.list_settings(db)


@router.put(
    "/email-configuration/{event_type}",
    response_model=NotificationSettingResponse,
    summary="[Admin] Update email configuration for an event",
)
async def update_email_configuration(
    event_type: EmailEventType,
    request: NotificationSettingUpdateRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    return await email_config_service.update_setting(db, admin, event_type, request, client)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@router.post(
    "/notifications/send",
    response_model=SentCountResponse,
    summary="[Admin] Notify one user",
)
async def send_notification(
    request: AdminNotificationRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    sent = await notification_service.admin_send(
        db, admin.id, [request.user_id], request.type, request.title, request.message, client
    )
    return SentCountResponse(sent_count=sent)


@router.post(
    "/notifications/send-bulk",
    response_model=SentCountResponse,
    summary="[Admin] Notify a list of users",
)
async def send_bulk_notification(
    request: AdminBulkNotificationRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    sent = await notification_service.admin_send(
        db, admin.id, request.user_ids, request.type, request.title, request.message, client
    )
    return SentCountResponse(sent_count=sent)


@router.post(
    "/notifications/send-to-all",
    response_model=SentCountResponse,
    summary="[Admin] Notify every active customer",
)
async def send_notification_to_all(
    request: AdminBroadcastRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    sent = await notification_service.admin_send_to_all(
        db, admin.id, request.type, request.title, request.message, client
    )
    return SentCountResponse(sent_count=sent)
