"""User management: admin CRUD and self-service profile changes."""

import logging
import uuid
from typing import Any

from sqlalchemy import ColumnElement, case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.core.exceptions import BadRequest, Conflict, NotFound
from storerate.core.security import hash_password, verify_password
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User, UserRole
from storerate.schemas.user import UserDetailResponse
from storerate.services.auth_service import EMAIL_TAKEN
from storerate.services.listing import (
    SortOrder,
    UserSortField,
    apply_sort,
    contains_filter,
    resolve_sort_column,
    where_all,
)
from storerate.services.statistics_service import round_average

logger = logging.getLogger(__name__)

_USER_SORT_COLUMNS: dict[UserSortField, ColumnElement[Any]] = {
    UserSortField.NAME: User.name,
    UserSortField.EMAIL: User.email,
    UserSortField.ADDRESS: User.address,
    UserSortField.ROLE: User.role,
    UserSortField.CREATED_AT: User.created_at,
}


def owner_rating_column() -> ColumnElement[Any]:
    """Average of all ratings across the user's stores; NULL unless a store owner."""
    owner_avg = (
        select(func.avg(Rating.rating))
        .join(Store, Store.id == Rating.store_id)
        .where(Store.owner_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    return case((User.role == UserRole.STORE_OWNER, owner_avg), else_=None).label("rating")


def _to_detail(user: User, rating: Any) -> UserDetailResponse:
    return UserDetailResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        address=user.address,
        role=user.role,
        created_at=user.created_at,
        rating=round_average(rating) if rating is not None else None,
    )


class UserService:
    """Repository-style operations on users."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_users(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
        address: str | None = None,
        role: UserRole | None = None,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> list[UserDetailResponse]:
        """List every user matching the filters. This listing is not paginated."""
        stmt = where_all(
            select(User, owner_rating_column()),
            contains_filter(User.name, name),
            contains_filter(User.email, email),
            contains_filter(User.address, address),
            User.role == role if role is not None else None,
        )
        sort_column = resolve_sort_column(_USER_SORT_COLUMNS, sort_by, UserSortField.NAME)
        stmt = apply_sort(stmt, sort_column, sort_order, User.id)

        result = await self.db.execute(stmt)
        return [_to_detail(user, rating) for user, rating in result.all()]

    async def get_user(self, user_id: uuid.UUID) -> UserDetailResponse:
        """Raises NotFound if the user does not exist."""
        result = await self.db.execute(
            select(User, owner_rating_column()).where(User.id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFound("User not found")
        user, rating = row
        return _to_detail(user, rating)

    async def create_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        address: str,
        role: UserRole = UserRole.NORMAL_USER,
    ) -> User:
        """Create a user with any role (admin operation).

        Raises:
            Conflict: If the email is already registered
        """
        existing = await self.db.scalar(select(User.id).where(User.email == email.strip()))
        if existing is not None:
            raise Conflict(EMAIL_TAKEN)

        user = User(
            name=name.strip(),
            email=email.strip(),
            password=hash_password(password),
            address=address.strip(),
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict(EMAIL_TAKEN)
        await self.db.refresh(user)

        logger.info("Created user %s with role %s", user.id, role.value)
        return user

    async def update_password(
        self, user: User, current_password: str, new_password: str
    ) -> None:
        """Change a user's own password after checking the current one.

        Raises:
            BadRequest: If ``current_password`` does not match
        """
        if not verify_password(current_password, user.password):
            raise BadRequest("Current password is incorrect")

        user.password = hash_password(new_password)
        await self.db.commit()
        logger.info("Password changed for user %s", user.id)

    async def update_profile(self, user: User, name: str, address: str) -> User:
        user.name = name.strip()
        user.address = address.strip()
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def delete_user(self, user_id: uuid.UUID) -> None:
        """Delete a user; their stores and ratings go with them.

        Raises:
            NotFound: If the user does not exist
        """
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        await self.db.delete(user)
        await self.db.commit()
        logger.info("Deleted user %s", user_id)
