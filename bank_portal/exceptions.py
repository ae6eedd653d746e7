"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientFundsError)
without importing HTTP concepts. The handlers registered here translate them
into HTTP responses with a consistent body:

    {"detail": "<message>", "error_type": "<machine-readable code>"}

Exception hierarchy:
    BankAPIError (base)
    ├── InsufficientFundsError        - debit would make a balance negative
    ├── AccountNotFoundError          - requested account doesn't exist
    ├── ResourceNotFoundError         - any other missing row (card, ticket, ...)
    ├── UnauthorizedAccessError       - resource belongs to someone else
    ├── DuplicateEmailError           - email already registered
    ├── InvalidCredentialsError       - bad login
    ├── InvalidTokenError             - unknown or expired password-reset token
    ├── InvalidStatusTransitionError  - workflow step not allowed from current status
    ├── AccountNotActiveError         - account is frozen or closed
    ├── CardLimitExceededError        - purchase over spending or daily limit
    ├── BusinessRuleError             - any other rejected request
    └── RateLimitExceededError        - too many requests in the window
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all Bank Portal domain errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class InsufficientFundsError(BankAPIError):
    """
    Raised when a debit, transfer, purchase or payment would cause a
    negative balance.

    Attributes:
        account_id: The account that lacks sufficient funds.
        requested_cents: The total amount the operation needs.
        available_cents: The current balance of the account.
    """

    def __init__(
        self,
        account_id: uuid.UUID,
        requested_cents: int,
        available_cents: int,
    ):
        self.account_id = account_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient funds: requested {requested_cents} cents, "
            f"available {available_cents} cents"
        )


class AccountNotFoundError(BankAPIError):
    """Raised when a requested account does not exist."""

    def __init__(self, account_id: uuid.UUID | str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class ResourceNotFoundError(BankAPIError):
    """Raised when any non-account resource does not exist."""

    def __init__(self, resource: str, resource_id: uuid.UUID | str | None = None):
        self.resource = resource
        self.resource_id = resource_id
        if resource_id is None:
            super().__init__(f"{resource} not found")
        else:
            super().__init__(f"{resource} {resource_id} not found")


class UnauthorizedAccessError(BankAPIError):
    """Raised when a user attempts to access a resource they don't own."""

    def __init__(self, detail: str = "You do not have access to this resource"):
        super().__init__(detail)


class DuplicateEmailError(BankAPIError):
    """Raised when attempting to register with an email that's already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class InvalidCredentialsError(BankAPIError):
    """Raised when login credentials are incorrect."""

    def __init__(self):
        super().__init__("Invalid email or password")


class InvalidTokenError(BankAPIError):
    """Raised when a password-reset token is unknown, used, or expired."""

    def __init__(self):
        super().__init__("Invalid or expired reset token")


class InvalidStatusTransitionError(BankAPIError):
    """Raised when a workflow operation is not allowed from the row's current status."""

    def __init__(self, resource: str, current: str, target: str | None = None):
        self.resource = resource
        self.current = current
        self.target = target
        if target is None:
            super().__init__(f"{resource} cannot be modified while {current}")
        else:
            super().__init__(f"{resource} cannot move from {current} to {target}")


class AccountNotActiveError(BankAPIError):
    """Raised when money would move through a frozen or closed account."""

    def __init__(self, account_id: uuid.UUID, status: str):
        self.account_id = account_id
        self.status = status
        super().__init__(f"Account {account_id} is {status}")


class CardLimitExceededError(BankAPIError):
    """Raised when a card purchase exceeds the card's spending or daily limit."""

    def __init__(self, limit_type: str, limit_cents: int, attempted_cents: int):
        self.limit_type = limit_type
        self.limit_cents = limit_cents
        self.attempted_cents = attempted_cents
        super().__init__(
            f"Card {limit_type} limit of {limit_cents} cents exceeded "
            f"(attempted {attempted_cents} cents)"
        )


class BusinessRuleError(BankAPIError):
    """Raised when a request is well-formed but violates a business rule."""


class RateLimitExceededError(BankAPIError):
    """Raised by the rate-limit dependency when a client exceeds its window."""

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__("Too many requests. Please try again later.")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

# Simple (exception, status, error_type) mappings; handlers with extra
# fields are registered explicitly below.
_SIMPLE_HANDLERS: list[tuple[type[BankAPIError], int, str]] = [
    (AccountNotFoundError, 404, "account_not_found"),
    (ResourceNotFoundError, 404, "not_found"),
    (UnauthorizedAccessError, 403, "unauthorized_access"),
    (DuplicateEmailError, 409, "duplicate_email"),
    (InvalidCredentialsError, 401, "invalid_credentials"),
    (InvalidTokenError, 400, "invalid_token"),
    (InvalidStatusTransitionError, 409, "invalid_status_transition"),
    (AccountNotActiveError, 422, "account_not_active"),
    (CardLimitExceededError, 422, "card_limit_exceeded"),
    (BusinessRuleError, 400, "business_rule"),
]


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    This is called once during app construction in main.py.
    """

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": exc.detail,
                "error_type": "insufficient_funds",
                "requested_cents": exc.requested_cents,
                "available_cents": exc.available_cents,
            },
        )

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(
        request: Request, exc: RateLimitExceededError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={
                "detail": exc.detail,
                "error_type": "rate_limited",
                "retry_after": exc.retry_after,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    for exc_class, status_code, error_type in _SIMPLE_HANDLERS:
        app.add_exception_handler(
            exc_class, _make_handler(status_code, error_type)
        )


def _make_handler(status_code: int, error_type: str):
    async def handler(request: Request, exc: BankAPIError) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.detail, "error_type": error_type},
        )

    return handler
