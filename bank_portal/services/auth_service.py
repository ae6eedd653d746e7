"""
Authentication service - signup, login and password reset.

This module contains the core auth logic, separated from HTTP concerns.
The router calls these functions and translates the results into HTTP
responses.

Signup flow:
  1. Check if email is already registered
  2. Hash the password with Argon2id
  3. Create User + CustomerProfile in a single database transaction
  4. Return a JWT token so the user is immediately logged in

Login flow:
  1. Look up user by email
  2. Verify password against stored hash
  3. Return a JWT token

Password reset flow:
  1. forgot_password stores a random single-use token with an expiry and
     emails a link to the frontend's reset page. The response is the same
     whether or not the email is registered.
  2. reset_password checks the token is known and unexpired, re-hashes the
     password and deletes the token.

Security notes:
  - Login returns the same error for "wrong password", "email not found"
    and "user deactivated" to prevent user enumeration
  - Reset tokens and passwords are never logged
"""

from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.config import settings
from bank_portal.exceptions import DuplicateEmailError, InvalidCredentialsError, InvalidTokenError
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.models.password_reset import PasswordResetToken
from bank_portal.models.user import User, UserRole
from bank_portal.security import create_access_token, generate_reset_token, hash_password, verify_password
from bank_portal.services import email_service

logger = structlog.get_logger()

FORGOT_PASSWORD_MESSAGE = "If that email is registered, a password reset link has been sent."


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: str | None = None,
    role: UserRole = UserRole.CUSTOMER,
) -> tuple[User, CustomerProfile]:
    """
    Create a User and its CustomerProfile.

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise DuplicateEmailError(email)

    user = User(
        email=email,
        hashed_password=hash_password(password),
        role=role,
    )
    db.add(user)
    # Flush to get the user.id assigned (needed for the FK below)
    await db.flush()

    profile = CustomerProfile(
        user_id=user.id,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
    )
    db.add(profile)
    await db.flush()

    logger.info("user_created", user_id=str(user.id), role=role.value)
    return user, profile


async def signup(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: str | None = None,
) -> tuple[User, str]:
    """
    Register a new customer and log them in.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    user, _ = await create_user(db, email, password, first_name, last_name, phone)
    token = create_access_token(user.id)
    return user, token


async def login(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Raises:
        InvalidCredentialsError: Unknown email, wrong password or inactive user.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    # Same error for every case - prevents user enumeration
    if not user:
        raise InvalidCredentialsError()

    if not verify_password(password, user.hashed_password):
        logger.info("login_failed", user_id=str(user.id))
        raise InvalidCredentialsError()

    if not user.is_active:
        raise InvalidCredentialsError()

    token = create_access_token(user.id)
    return user, token


async def get_me(db: AsyncSession, user: User) -> dict:
    """The authenticated user plus their profile names."""
    result = await db.execute(
        select(CustomerProfile).where(CustomerProfile.user_id == user.id)
    )
    profile = result.scalar_one_or_none()
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "first_name": profile.first_name if profile else None,
        "last_name": profile.last_name if profile else None,
    }


async def send_password_reset(db: AsyncSession, user: User) -> None:
    """Store a fresh reset token for the user and email the link."""
    token = generate_reset_token()
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
    )
    await db.flush()

    result = await db.execute(
        select(CustomerProfile.first_name).where(CustomerProfile.user_id == user.id)
    )
    first_name = result.scalar_one_or_none() or "there"
    reset_link = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    await email_service.send_password_reset_email(db, user, first_name, reset_link)
    logger.info("password_reset_requested", user_id=str(user.id))


async def forgot_password(db: AsyncSession, email: str) -> str:
    """Returns the same message whether or not the email exists."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is not None and user.is_active:
        await send_password_reset(db, user)
    return FORGOT_PASSWORD_MESSAGE


async def reset_password(db: AsyncSession, token: str, new_password: str) -> None:
    """
    Raises:
        InvalidTokenError: The token is unknown or has expired.
    """
    # Expiry compared in SQL; SQLite hands back naive datetimes
    result = await db.execute(
        select(PasswordResetToken)
        .where(PasswordResetToken.token == token)
        .where(PasswordResetToken.expires_at > datetime.now(timezone.utc))
    )
    reset = result.scalar_one_or_none()
    if reset is None:
        raise InvalidTokenError()

    user = await db.get(User, reset.user_id)
    user.hashed_password = hash_password(new_password)

    # Single use: drop every outstanding token for this user
    await db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id))
    await db.flush()
    logger.info("password_reset_completed", user_id=str(user.id))
