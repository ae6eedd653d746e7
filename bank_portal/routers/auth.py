"""
Authentication router - signup, login and password reset.

Signup, login and the password-reset pair are the only public endpoints
besides /health and /market. Everything else requires a valid JWT token.

Endpoints:
  POST /auth/signup           - Register a new customer and get a token
  POST /auth/login            - Authenticate and get a token
  GET  /auth/me               - The authenticated user
  POST /auth/forgot-password  - Email a password reset link
  POST /auth/reset-password   - Set a new password with a reset token

Security notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - forgot-password answers identically for registered and unknown emails.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.dependencies import get_current_user
from bank_portal.models.user import User
from bank_portal.rate_limit import rate_limit
from bank_portal.schemas.auth import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupResponse,
    TokenResponse,
    UserLoginRequest,
    UserSignupRequest,
)
from bank_portal.schemas.user import CurrentUserResponse
from bank_portal.services import auth_service

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new customer",
)
async def signup(
    request: UserSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new customer.

    Creates a User (authentication identity) and a CustomerProfile in a
    single atomic transaction. Returns a JWT token so the user is
    immediately logged in after signup.

    - **email**: Must be a valid email format and not already registered
    - **password**: Minimum 8 characters
    - **first_name** / **last_name**: Required, 1-100 characters
    - **phone**: Optional
    """
    user, token = await auth_service.signup(
        db=db,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
    )

    return SignupResponse(
        user_id=user.id,
        email=user.email,
        role=user.role.value,
        token=token,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Returns a JWT bearer token for the Authorization header:

        Authorization: Bearer <token>
    """
    _, token = await auth_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )
    return TokenResponse(token=token)


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    summary="Get the authenticated user",
)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await auth_service.get_me(db, user)


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset link",
    dependencies=[Depends(rate_limit(3))],
)
async def forgot_password(
    request: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    message = await auth_service.forgot_password(db, request.email)
    return MessageResponse(message=message)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset a password with a reset token",
    dependencies=[Depends(rate_limit(5))],
)
async def reset_password(
    request: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    """The token is single use and expires after PASSWORD_RESET_EXPIRE_MINUTES."""
    await auth_service.reset_password(db, request.token, request.new_password)
    return MessageResponse(message="Password has been reset. You can now log in.")
