"""Password hashing and session token handling."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from passlib.context import CryptContext

from storerate.core.config import settings
from storerate.core.exceptions import Unauthenticated

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Hash a plain password with a per-password salt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored hash. Malformed hashes never verify."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(user_id: uuid.UUID, *, expires_delta: timedelta | None = None) -> str:
    """Issue a signed session token whose only claim is the user id."""
    now = datetime.now(UTC)
    expires = now + (expires_delta or timedelta(hours=settings.access_token_expire_hours))
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """Verify a session token and return the user id it carries.

    Raises:
        Unauthenticated: If the token is expired, badly signed or malformed
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token")

    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise Unauthenticated("Invalid token")
