"""Unit tests for role and ownership checks."""

import uuid
from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.core.exceptions import Forbidden, NotFound
from storerate.core.permissions import (
    ensure_rating_owner_or_admin,
    ensure_self_or_admin,
    ensure_store_owner_or_admin,
    has_role,
    require_roles,
)
from storerate.models import User, UserRole


class TestRoleChecks:
    def test_has_role(self) -> None:
        user = User(role=UserRole.STORE_OWNER)
        assert has_role(user, frozenset({UserRole.STORE_OWNER, UserRole.SYSTEM_ADMIN}))
        assert not has_role(user, frozenset({UserRole.NORMAL_USER}))

    @pytest.mark.asyncio
    async def test_require_roles_dependency(self) -> None:
        check = require_roles(UserRole.SYSTEM_ADMIN)
        admin = User(id=uuid.uuid4(), role=UserRole.SYSTEM_ADMIN)
        shopper = User(id=uuid.uuid4(), role=UserRole.NORMAL_USER)

        assert await check(admin) is admin
        with pytest.raises(Forbidden):
            await check(shopper)

    def test_self_or_admin(self) -> None:
        me = User(id=uuid.uuid4(), role=UserRole.NORMAL_USER)
        admin = User(id=uuid.uuid4(), role=UserRole.SYSTEM_ADMIN)

        ensure_self_or_admin(me, me.id)
        ensure_self_or_admin(admin, me.id)
        with pytest.raises(Forbidden):
            ensure_self_or_admin(me, admin.id)


class TestStoreOwnership:
    @pytest.mark.asyncio
    async def test_owner_of_store_allowed(
        self, db_session: AsyncSession, owner: User, store_factory: Callable[..., Any]
    ) -> None:
        store = await store_factory(owner_id=owner.id)
        await ensure_store_owner_or_admin(db_session, owner, store.id)

    @pytest.mark.asyncio
    async def test_admin_allowed_even_for_missing_store(
        self, db_session: AsyncSession, admin: User
    ) -> None:
        await ensure_store_owner_or_admin(db_session, admin, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_owner_of_missing_store_gets_not_found(
        self, db_session: AsyncSession, owner: User
    ) -> None:
        with pytest.raises(NotFound):
            await ensure_store_owner_or_admin(db_session, owner, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_normal_user_denied(
        self,
        db_session: AsyncSession,
        owner: User,
        normal_user: User,
        store_factory: Callable[..., Any],
    ) -> None:
        store = await store_factory(owner_id=owner.id)
        with pytest.raises(Forbidden):
            await ensure_store_owner_or_admin(db_session, normal_user, store.id)


class TestRatingOwnership:
    @pytest.mark.asyncio
    async def test_author_and_admin_allowed(
        self,
        db_session: AsyncSession,
        admin: User,
        owner: User,
        normal_user: User,
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        store = await store_factory(owner_id=owner.id)
        rating = await rating_factory(user_id=normal_user.id, store_id=store.id)

        assert (await ensure_rating_owner_or_admin(db_session, normal_user, rating.id)).id == rating.id
        assert (await ensure_rating_owner_or_admin(db_session, admin, rating.id)).id == rating.id
        with pytest.raises(NotFound, match="Rating not found or access denied"):
            await ensure_rating_owner_or_admin(db_session, owner, rating.id)

    @pytest.mark.asyncio
    async def test_missing_rating(self, db_session: AsyncSession, admin: User) -> None:
        with pytest.raises(NotFound):
            await ensure_rating_owner_or_admin(db_session, admin, uuid.uuid4())
