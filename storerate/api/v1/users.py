"""User management endpoints: admin CRUD and self-service account changes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from storerate.core.deps import AdminUser, CurrentUser, DBSession
from storerate.core.exceptions import ValidationFailed
from storerate.core.permissions import ensure_self_or_admin
from storerate.core.validation import (
    ROLE_RULE,
    is_valid_role,
    validate_password_update,
    validate_profile_update,
    validate_user_creation,
)
from storerate.models.user import UserRole
from storerate.schemas.common import ApiResponse, ok
from storerate.schemas.user import (
    CurrentUserData,
    PasswordUpdate,
    ProfileUpdate,
    UserCreate,
    UserData,
    UserListData,
    UserResponse,
    UserStats,
)
from storerate.services.listing import SortOrder
from storerate.services.statistics_service import StatisticsService
from storerate.services.user_service import UserService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[UserListData],
    summary="List users",
    description="All users matching the filters. Store owners carry their average rating.",
)
async def list_users(
    _admin: AdminUser,
    db: DBSession,
    name: str | None = None,
    email: str | None = None,
    address: str | None = None,
    role: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> ApiResponse[UserListData]:
    role_filter: UserRole | None = None
    if role:
        if not is_valid_role(role):
            raise ValidationFailed([ROLE_RULE])
        role_filter = UserRole(role)

    users = await UserService(db).list_users(
        name=name,
        email=email,
        address=address,
        role=role_filter,
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.ASC),
    )
    return ok("Users retrieved successfully", UserListData(users=users, total=len(users)))


@router.get(
    "/stats",
    response_model=ApiResponse[UserStats],
    summary="User statistics",
)
async def user_stats(_admin: AdminUser, db: DBSession) -> ApiResponse[UserStats]:
    stats = await StatisticsService(db).user_statistics()
    return ok("User statistics retrieved successfully", stats)


@router.post(
    "",
    response_model=ApiResponse[CurrentUserData],
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a user with any role.",
)
async def create_user(
    data: UserCreate,
    _admin: AdminUser,
    db: DBSession,
) -> ApiResponse[CurrentUserData]:
    validate_user_creation(data.name, data.email, data.password, data.address, data.role)

    user = await UserService(db).create_user(
        name=data.name,
        email=data.email,
        password=data.password,
        address=data.address,
        role=UserRole(data.role) if data.role else UserRole.NORMAL_USER,
    )
    return ok("User created successfully", CurrentUserData(user=UserResponse.model_validate(user)))


# === Self-service ===


@router.put(
    "/password",
    response_model=ApiResponse[None],
    summary="Change password",
)
async def update_password(
    data: PasswordUpdate,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    validate_password_update(data.current_password, data.new_password)
    await UserService(db).update_password(user, data.current_password, data.new_password)
    return ok("Password updated successfully")


@router.put(
    "/profile",
    response_model=ApiResponse[CurrentUserData],
    summary="Update profile",
    description="Change the caller's name and address.",
)
async def update_profile(
    data: ProfileUpdate,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[CurrentUserData]:
    validate_profile_update(data.name, data.address)
    updated = await UserService(db).update_profile(user, data.name, data.address)
    return ok(
        "Profile updated successfully",
        CurrentUserData(user=UserResponse.model_validate(updated)),
    )


# === By id ===


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserData],
    summary="Get user",
    description="Admins may read any user; everyone else only themselves.",
)
async def get_user(
    user_id: UUID,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[UserData]:
    ensure_self_or_admin(user, user_id)
    detail = await UserService(db).get_user(user_id)
    return ok("User retrieved successfully", UserData(user=detail))


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    summary="Delete user",
    description="Deletes the user together with their stores and ratings.",
)
async def delete_user(
    user_id: UUID,
    _admin: AdminUser,
    db: DBSession,
) -> ApiResponse[None]:
    await UserService(db).delete_user(user_id)
    return ok("User deleted successfully")
