"""Registration, login and session resolution."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.core.exceptions import Conflict, Unauthenticated
from storerate.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from storerate.models.user import User, UserRole

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Credential and identity operations over the users table."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email.strip()))
        return result.scalar_one_or_none()

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        address: str,
    ) -> tuple[User, str]:
        """Create a normal user and sign them in.

        Raises:
            Conflict: If the email is already registered
        """
        if await self.get_user_by_email(email) is not None:
            raise Conflict(EMAIL_TAKEN)

        user = User(
            name=name.strip(),
            email=email.strip(),
            password=hash_password(password),
            address=address.strip(),
            role=UserRole.NORMAL_USER,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict(EMAIL_TAKEN)
        await self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user, create_access_token(user.id)

    async def authenticate(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a session token.

        Unknown email and wrong password produce the same error.

        Raises:
            Unauthenticated: If the credentials do not match a user
        """
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login attempt")
            raise Unauthenticated(INVALID_CREDENTIALS)

        return user, create_access_token(user.id)

    async def resolve_session(self, token: str) -> User:
        """Return the live user a session token refers to.

        Raises:
            Unauthenticated: If the token is invalid or the user no longer exists
        """
        user_id: uuid.UUID = decode_access_token(token)
        user = await self.db.get(User, user_id, populate_existing=True)
        if user is None:
            raise Unauthenticated("User not found")
        return user
