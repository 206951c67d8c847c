"""Dependency injection for FastAPI routes."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

# Re-export auth and permission dependencies for convenience
from storerate.core.auth import CurrentUser, get_current_user
from storerate.core.database import get_async_session
from storerate.core.permissions import (
    AdminUser,
    RaterUser,
    StoreOwnerOrAdminUser,
    require_roles,
)

# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_async_session)]


__all__ = [
    "AdminUser",
    "CurrentUser",
    "DBSession",
    "RaterUser",
    "StoreOwnerOrAdminUser",
    "get_async_session",
    "get_current_user",
    "require_roles",
]
