"""
Pydantic schemas for User-related responses and admin user management.

hashed_password is never part of any response schema.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from bank_portal.models.user import UserRole
from bank_portal.schemas.account import AccountResponse
from bank_portal.schemas.profile import ProfileResponse


class UserResponse(BaseModel):
    """Public representation of a User."""
    id: uuid.UUID
    email: EmailStr
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CurrentUserResponse(UserResponse):
    """GET /auth/me: the user plus the profile names."""
    first_name: str | None = None
    last_name: str | None = None


class AdminUserListItem(UserResponse):
    first_name: str | None = None
    last_name: str | None = None
    kyc_status: str | None = None


class AdminUserDetailResponse(BaseModel):
    user: UserResponse
    profile: ProfileResponse | None
    accounts: list[AccountResponse]


class AdminUserCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = None
    role: UserRole = UserRole.CUSTOMER


class AdminUserUpdateRequest(BaseModel):
    """Request body for PATCH /admin/users/{id} (all fields optional)."""
    email: EmailStr | None = None
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None
