"""Bearer-token authentication for FastAPI routes."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.core.database import get_async_session
from storerate.core.exceptions import Unauthenticated
from storerate.models.user import User
from storerate.services.auth_service import AuthService

# HTTP Bearer token security scheme. Missing credentials are reported by
# get_current_user so the response uses the standard envelope.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """Resolve the request's bearer token to the live user row.

    The token is read from this request only; the user (and therefore the
    role) is fetched from the database on every call.

    Raises:
        Unauthenticated: If no token is supplied or it does not resolve
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Access token required")

    return await AuthService(db).resolve_session(credentials.credentials)


# Type alias for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
