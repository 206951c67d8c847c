"""Pydantic schemas for users and authentication.

Request fields are deliberately loose (optional strings) so that
``storerate.core.validation`` can report every broken rule at once instead of
stopping at the first missing field.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from storerate.models.user import UserRole
from storerate.schemas.common import BaseSchema

# === Requests ===


class RegisterRequest(BaseSchema):
    """Self-service sign-up. New accounts are always normal users."""

    name: str = ""
    email: str = ""
    password: str = ""
    address: str = ""


class LoginRequest(BaseSchema):
    email: str = ""
    password: str = ""


class UserCreate(BaseSchema):
    """Admin-created account with an explicit role."""

    name: str = ""
    email: str = ""
    password: str = ""
    address: str = ""
    role: str | None = Field(default=None, description="Defaults to normal_user")


class PasswordUpdate(BaseSchema):
    current_password: str = Field(default="", alias="currentPassword")
    new_password: str = Field(default="", alias="newPassword")


class ProfileUpdate(BaseSchema):
    name: str = ""
    address: str = ""


# === Responses ===


class UserResponse(BaseSchema):
    """Public view of a user. The password hash is never exposed."""

    id: UUID
    name: str
    email: str
    address: str
    role: UserRole
    created_at: datetime


class UserDetailResponse(UserResponse):
    """User with the average rating across stores they own (store owners only)."""

    rating: float | None = None


class AuthData(BaseSchema):
    user: UserResponse
    token: str


class CurrentUserData(BaseSchema):
    user: UserResponse


class UserData(BaseSchema):
    user: UserDetailResponse


class UserListData(BaseSchema):
    users: list[UserDetailResponse]
    total: int


class UserStats(BaseSchema):
    """Head count per role."""

    total_users: int = 0
    normal_users: int = 0
    store_owners: int = 0
    system_admins: int = 0
