"""
FastAPI dependencies for authentication, authorization and request context.

The dependency chain enforces both authentication and role-based access:

  get_current_user (JWT -> User)
      ├── get_current_customer (User -> CustomerProfile)  [CUSTOMER role]
      └── require_admin (User -> User)                    [ADMIN role]

Role-based access control:
  - CUSTOMER: can only reach their own accounts and data. Customer banking
    endpoints depend on get_current_customer, which scopes every service
    call to the authenticated customer's profile.
  - ADMIN: reaches everything under /admin. Admins are blocked from the
    customer banking endpoints so that back-office staff never initiate
    customer transactions from their own login.

Every protected endpoint declares one of these as a parameter. If the
dependency fails (invalid token, wrong role) the request is rejected before
the route handler runs.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.database import get_db
from bank_portal.models.user import User, UserRole
from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.security import decode_access_token


# Reads "Authorization: Bearer <token>"; tokenUrl feeds Swagger UI's Authorize button.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the JWT token, then return the corresponding User.

    Raises:
        HTTPException 401: If the token is invalid, or the user doesn't exist
            or has been deactivated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user_id = decode_access_token(token)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


async def get_current_customer(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CustomerProfile:
    """
    Get the CustomerProfile for the authenticated user.

    Raises:
        HTTPException 403: If the user is an admin.
        HTTPException 404: If the user has no profile.
    """
    if user.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin accounts cannot access customer banking endpoints. "
                   "Use /admin/* endpoints instead.",
        )

    result = await db.execute(
        select(CustomerProfile).where(CustomerProfile.user_id == user.id)
    )
    profile = result.scalar_one_or_none()

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer profile not found",
        )

    return profile


async def require_admin(
    user: User = Depends(get_current_user),
) -> User:
    """
    Require the authenticated user to have the ADMIN role.

    Raises:
        HTTPException 403: If the user is not an admin.
    """
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


@dataclass
class ClientInfo:
    """Caller details recorded on audit log rows."""
    ip_address: str | None
    user_agent: str | None


def get_client_info(request: Request) -> ClientInfo:
    user_agent = request.headers.get("user-agent")
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=user_agent[:255] if user_agent else None,
    )
