"""Role and ownership checks.

Every check runs after authentication and before any input validation or
database mutation. Role decisions match ``UserRole`` exhaustively so adding a
role forces each check to be revisited.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Annotated, assert_never

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.core.auth import get_current_user
from storerate.core.exceptions import Forbidden, NotFound
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User, UserRole

logger = logging.getLogger(__name__)


def has_role(user: User, allowed: frozenset[UserRole]) -> bool:
    match user.role:
        case UserRole.NORMAL_USER | UserRole.STORE_OWNER | UserRole.SYSTEM_ADMIN:
            return user.role in allowed
        case _ as unreachable:
            assert_never(unreachable)


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Build a dependency that admits only users holding one of ``roles``."""
    allowed = frozenset(roles)

    async def _check(user: User = Depends(get_current_user)) -> User:
        if not has_role(user, allowed):
            logger.info(
                "Role %s denied for user %s (allowed: %s)",
                user.role.value,
                user.id,
                sorted(r.value for r in allowed),
            )
            raise Forbidden("Insufficient permissions")
        return user

    return _check


def ensure_self_or_admin(user: User, resource_user_id: uuid.UUID) -> None:
    """Allow admins, or the user acting on their own record."""
    match user.role:
        case UserRole.SYSTEM_ADMIN:
            return
        case UserRole.NORMAL_USER | UserRole.STORE_OWNER:
            if user.id == resource_user_id:
                return
            raise Forbidden("Access denied: You can only access your own resources")
        case _ as unreachable:
            assert_never(unreachable)


async def ensure_store_owner_or_admin(db: AsyncSession, user: User, store_id: uuid.UUID) -> None:
    """Allow admins, or the store owner who owns ``store_id``.

    Raises:
        NotFound: If a non-admin asks about a store that does not exist
        Forbidden: If the caller is neither admin nor the store's owner
    """
    match user.role:
        case UserRole.SYSTEM_ADMIN:
            return
        case UserRole.NORMAL_USER:
            raise Forbidden("Access denied: Store owner access required")
        case UserRole.STORE_OWNER:
            row = (
                await db.execute(select(Store.id, Store.owner_id).where(Store.id == store_id))
            ).one_or_none()
            if row is None:
                raise NotFound("Store not found")
            if row.owner_id != user.id:
                raise Forbidden("Access denied: You can only access your own store")
        case _ as unreachable:
            assert_never(unreachable)


async def ensure_rating_owner_or_admin(db: AsyncSession, user: User, rating_id: uuid.UUID) -> Rating:
    """Load a rating the caller may modify.

    Raises:
        NotFound: If the rating does not exist, or belongs to someone else and
            the caller is not an admin
    """
    rating = await db.get(Rating, rating_id)
    if rating is None:
        raise NotFound("Rating not found")

    match user.role:
        case UserRole.SYSTEM_ADMIN:
            return rating
        case UserRole.NORMAL_USER | UserRole.STORE_OWNER:
            if rating.user_id == user.id:
                return rating
            raise NotFound("Rating not found or access denied")
        case _ as unreachable:
            assert_never(unreachable)


# Type aliases for dependency injection
AdminUser = Annotated[User, Depends(require_roles(UserRole.SYSTEM_ADMIN))]
StoreOwnerOrAdminUser = Annotated[
    User, Depends(require_roles(UserRole.STORE_OWNER, UserRole.SYSTEM_ADMIN))
]
RaterUser = Annotated[User, Depends(require_roles(UserRole.NORMAL_USER, UserRole.SYSTEM_ADMIN))]
