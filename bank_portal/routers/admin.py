"""
Admin router - back-office endpoints for users, accounts, money movement
review and oversight.

All endpoints require the ADMIN role.

Endpoints:
  GET    /admin/users                            - List users (filter by role)
  POST   /admin/users                            - Create a customer or admin
  GET    /admin/users/{user_id}                  - User + profile + accounts
  PATCH  /admin/users/{user_id}                  - Edit names, email, role, active flag
  DELETE /admin/users/{user_id}                  - Deactivate a user
  POST   /admin/users/{user_id}/reset-password   - Email a password reset link

  GET    /admin/accounts                         - List all accounts (filter by status)
  GET    /admin/accounts/{account_id}            - Any account's details
  GET    /admin/accounts/{account_id}/balance    - Any account's balance
  GET    /admin/accounts/{account_id}/transactions - Any account's ledger
  POST   /admin/accounts/{account_id}/credit     - Manual credit
  POST   /admin/accounts/{account_id}/debit      - Manual debit
  POST   /admin/accounts/{account_id}/status     - Freeze, unfreeze or close

  GET    /admin/transactions                     - Every ledger row (filters)
  GET    /admin/transactions/{transaction_id}    - Any ledger row

  GET    /admin/transfers/pending                - Transfers awaiting review
  GET    /admin/transfers                        - All transfers (filter by status)
  POST   /admin/transfers/{transfer_id}/approve  - Approve and move the money
  POST   /admin/transfers/{transfer_id}/reject   - Reject with a reason

  GET    /admin/stats                            - Dashboard figures
  GET    /admin/audit-logs                       - Audit trail, newest first
  POST   /admin/email                            - Email a list of users

Every state-changing endpoint writes an audit log row with the caller's IP
address and user agent.

Support, KYC, inheritance, loans and email configuration live in
admin_workflows, mounted under the same prefix.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import ClientInfo, get_client_info, require_admin
from bank_portal.models.account import AccountStatus
from bank_portal.models.audit import AuditAction
from bank_portal.models.transaction import TransactionStatus, TransactionType
from bank_portal.models.transfer import TransferStatus
from bank_portal.models.user import User, UserRole
from bank_portal.rate_limit import rate_limit
from bank_portal.schemas.account import AccountResponse, BalanceResponse
from bank_portal.schemas.admin import (
    AccountStatusChangeRequest,
    AdminStatsResponse,
    BalanceAdjustmentRequest,
    BalanceAdjustmentResponse,
)
from bank_portal.schemas.audit import AuditLogResponse
from bank_portal.schemas.auth import MessageResponse
from bank_portal.schemas.email import AdminEmailRequest, AdminEmailResponse
from bank_portal.schemas.transaction import TransactionResponse
from bank_portal.schemas.transfer import TransferRejectRequest, TransferResponse
from bank_portal.schemas.user import (
    AdminUserCreateRequest,
    AdminUserDetailResponse,
    AdminUserListItem,
    AdminUserUpdateRequest,
    UserResponse,
)
from bank_portal.services import (
    account_service,
    admin_service,
    audit_service,
    transaction_service,
    transfer_service,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@router.get(
    "/users",
    response_model=list[AdminUserListItem],
    summary="[Admin] List users",
)
async def list_users(
    role: UserRole | None = Query(None, description="Filter by role"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_users(db, role_filter=role)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Create a user",
)
async def create_user(
    request: AdminUserCreateRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Creates the user and a profile; **role** defaults to customer."""
    return await admin_service.create_user(db, admin, request, client)


@router.get(
    "/users/{user_id}",
    response_model=AdminUserDetailResponse,
    summary="[Admin] Get a user with profile and accounts",
)
async def get_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.get_user_detail(db, user_id)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="[Admin] Update a user",
)
async def update_user(
    user_id: uuid.UUID,
    request: AdminUserUpdateRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """An admin cannot remove their own admin role or deactivate themselves."""
    return await admin_service.update_user(db, admin, user_id, request, client)


@router.delete(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="[Admin] Deactivate a user",
)
async def deactivate_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete: the user can no longer log in; their records are kept."""
    return await admin_service.deactivate_user(db, admin, user_id, client)


@router.post(
    "/users/{user_id}/reset-password",
    response_model=MessageResponse,
    summary="[Admin] Send a password reset link",
)
async def reset_user_password(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    await admin_service.send_password_reset(db, admin, user_id, client)
    return MessageResponse(message="Password reset link sent")


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

@router.get(
    "/accounts",
    response_model=list[AccountResponse],
    summary="[Admin] List all accounts",
)
async def list_accounts(
    status: AccountStatus | None = Query(None, description="Filter by status"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.admin_get_all_accounts(db, status_filter=status)


@router.get(
    "/accounts/{account_id}",
    response_model=AccountResponse,
    summary="[Admin] Get any account's details",
)
async def get_account(
    account_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.admin_get_account(db, account_id)


@router.get(
    "/accounts/{account_id}/balance",
    response_model=BalanceResponse,
    summary="[Admin] Get any account's balance",
)
async def get_balance(
    account_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Includes both cached and computed balance for integrity verification."""
    return await account_service.admin_get_balance(db, account_id)


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=list[TransactionResponse],
    summary="[Admin] List any account's transactions",
)
async def list_account_transactions(
    account_id: uuid.UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.admin_get_account_transactions(
        db, account_id, limit=limit, offset=offset
    )


@router.post(
    "/accounts/{account_id}/credit",
    response_model=BalanceAdjustmentResponse,
    summary="[Admin] Credit an account",
    dependencies=[Depends(rate_limit(10))],
)
async def credit_account(
    account_id: uuid.UUID,
    request: BalanceAdjustmentRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Writes a credit ledger row; audited; the customer is emailed and notified."""
    account, txn = await account_service.admin_adjust_balance(
        db, admin, account_id, "credit", request.amount_cents, request.description, client
    )
    return {"account": account, "transaction": txn}


@router.post(
    "/accounts/{account_id}/debit",
    response_model=BalanceAdjustmentResponse,
    summary="[Admin] Debit an account",
    dependencies=[Depends(rate_limit(10))],
)
async def debit_account(
    account_id: uuid.UUID,
    request: BalanceAdjustmentRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Fails with 422 if the balance cannot cover the debit."""
    account, txn = await account_service.admin_adjust_balance(
        db, admin, account_id, "debit", request.amount_cents, request.description, client
    )
    return {"account": account, "transaction": txn}


@router.post(
    "/accounts/{account_id}/status",
    response_model=AccountResponse,
    summary="[Admin] Freeze, unfreeze or close an account",
)
async def change_account_status(
    account_id: uuid.UUID,
    request: AccountStatusChangeRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """A closed account cannot be reopened."""
    return await account_service.admin_change_status(
        db, admin, account_id, AccountStatus(request.status), request.reason, client
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

@router.get(
    "/transactions",
    response_model=list[TransactionResponse],
    summary="[Admin] List all transactions",
)
async def list_transactions(
    status: TransactionStatus | None = Query(None, description="Filter by status"),
    type: TransactionType | None = Query(None, description="Filter by type"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.admin_get_all_transactions(
        db=db,
        status_filter=status,
        type_filter=type,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/transactions/{transaction_id}",
    response_model=TransactionResponse,
    summary="[Admin] Get any transaction",
)
async def get_transaction(
    transaction_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.admin_get_transaction(db, transaction_id)


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------

@router.get(
    "/transfers/pending",
    response_model=list[TransferResponse],
    summary="[Admin] Transfers awaiting review",
)
async def list_pending_transfers(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Oldest first."""
    return await transfer_service.admin_list_pending(db)


@router.get(
    "/transfers",
    response_model=list[TransferResponse],
    summary="[Admin] List all transfers",
)
async def list_transfers(
    status: TransferStatus | None = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transfer_service.admin_list_transfers(
        db, status_filter=status, limit=limit, offset=offset
    )


@router.post(
    "/transfers/{transfer_id}/approve",
    response_model=TransferResponse,
    summary="[Admin] Approve a transfer",
)
async def approve_transfer(
    transfer_id: uuid.UUID,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """
    Debits the source (amount, fee and tax rows) and credits an internal
    destination. If the source is no longer active or can't cover the
    total, the transfer is marked failed and the error returned.
    """
    return await transfer_service.admin_approve(db, admin, transfer_id, client)


@router.post(
    "/transfers/{transfer_id}/reject",
    response_model=TransferResponse,
    summary="[Admin] Reject a transfer",
)
async def reject_transfer(
    transfer_id: uuid.UUID,
    request: TransferRejectRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    return await transfer_service.admin_reject(db, admin, transfer_id, request.reason, client)


# ---------------------------------------------------------------------------
# Oversight
# ---------------------------------------------------------------------------

@router.get(
    "/stats",
    response_model=AdminStatsResponse,
    summary="[Admin] Dashboard statistics",
)
async def get_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.get_stats(db)


@router.get(
    "/audit-logs",
    response_model=list[AuditLogResponse],
    summary="[Admin] Audit trail",
)
async def list_audit_logs(
    action: AuditAction | None = Query(None, description="Filter by action"),
    limit: int = Query(audit_service.MAX_AUDIT_ROWS, ge=1, le=audit_service.MAX_AUDIT_ROWS),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await audit_service.list_logs(db, action=action, limit=limit)


@router.post(
    "/email",
    response_model=AdminEmailResponse,
    summary="[Admin] Email a list of users",
    dependencies=[Depends(rate_limit(5))],
)
async def send_email(
    request: AdminEmailRequest,
    admin: User = Depends(require_admin),
    client: ClientInfo = Depends(get_client_info),
    db: AsyncSession = Depends(get_db),
):
    """Returns how many emails were actually delivered."""
    return await admin_service.send_bulk_email(
        db, admin, request.user_ids, request.subject, request.message, client
    )
