"""Tests for password hashing and session tokens."""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from storerate.core.config import settings
from storerate.core.exceptions import Unauthenticated
from storerate.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_is_salted_and_verifies(self) -> None:
        first = hash_password("Secret#Pass1")
        second = hash_password("Secret#Pass1")

        assert first != "Secret#Pass1"
        assert first != second
        assert verify_password("Secret#Pass1", first)
        assert verify_password("Secret#Pass1", second)

    def test_wrong_password_does_not_verify(self) -> None:
        hashed = hash_password("Secret#Pass1")
        assert not verify_password("Secret#Pass2", hashed)

    def test_malformed_hash_does_not_verify(self) -> None:
        assert not verify_password("Secret#Pass1", "not-a-bcrypt-hash")


class TestTokens:
    def test_round_trip_returns_user_id(self) -> None:
        user_id = uuid.uuid4()
        assert decode_access_token(create_access_token(user_id)) == user_id

    def test_token_carries_only_subject_and_times(self) -> None:
        token = create_access_token(uuid.uuid4())
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        assert set(payload) == {"sub", "iat", "exp"}

    def test_default_expiry_is_24_hours(self) -> None:
        token = create_access_token(uuid.uuid4())
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        assert payload["exp"] - payload["iat"] == settings.access_token_expire_hours * 3600

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-10))
        with pytest.raises(Unauthenticated) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Token expired"

    def test_wrong_signature_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "exp": now + timedelta(hours=1)},
            "some-other-secret-that-is-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(Unauthenticated) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Invalid token"

    def test_garbage_rejected(self) -> None:
        with pytest.raises(Unauthenticated):
            decode_access_token("not.a.token")

    def test_non_uuid_subject_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "42", "exp": now + timedelta(hours=1)},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(Unauthenticated):
            decode_access_token(token)

    def test_unauthenticated_sets_bearer_challenge(self) -> None:
        assert Unauthenticated().headers == {"WWW-Authenticate": "Bearer"}
        assert Unauthenticated().status_code == 401
