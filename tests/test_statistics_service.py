"""Unit tests for StatisticsService.

Aggregates are computed from live rows, so every test seeds ratings and reads
the numbers straight back.
"""

from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models import User, UserRole
from storerate.services.statistics_service import StatisticsService, round_average


async def _raters(user_factory: Callable[..., Any], n: int) -> list[User]:
    return [await user_factory() for _ in range(n)]


class TestStoreStatistics:
    """Tests for StatisticsService.store_statistics()."""

    @pytest.mark.asyncio
    async def test_zero_ratings(
        self,
        db_session: AsyncSession,
        owner: User,
        store_factory: Callable[..., Any],
    ) -> None:
        """A store nobody rated reports 0 / 0."""
        store = await store_factory(owner_id=owner.id)

        stats = await StatisticsService(db_session).store_statistics(store.id)

        assert stats.average_rating == 0
        assert stats.total_ratings == 0

    @pytest.mark.asyncio
    async def test_average_and_count(
        self,
        db_session: AsyncSession,
        owner: User,
        user_factory: Callable[..., Any],
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        """Ratings [5, 3, 4] give 4.00 over 3."""
        store = await store_factory(owner_id=owner.id)
        for rater, value in zip(await _raters(user_factory, 3), (5, 3, 4), strict=True):
            await rating_factory(user_id=rater.id, store_id=store.id, rating=value)

        stats = await StatisticsService(db_session).store_statistics(store.id)

        assert stats.average_rating == 4.0
        assert stats.total_ratings == 3

    @pytest.mark.asyncio
    async def test_rounds_to_two_decimals(
        self,
        db_session: AsyncSession,
        owner: User,
        user_factory: Callable[..., Any],
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        store = await store_factory(owner_id=owner.id)
        for rater, value in zip(await _raters(user_factory, 3), (5, 5, 4), strict=True):
            await rating_factory(user_id=rater.id, store_id=store.id, rating=value)

        stats = await StatisticsService(db_session).store_statistics(store.id)

        assert stats.average_rating == 4.67

    @pytest.mark.asyncio
    async def test_halves_round_up(
        self,
        db_session: AsyncSession,
        owner: User,
        user_factory: Callable[..., Any],
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        """Eight ratings averaging exactly 2.625 report 2.63, not 2.62."""
        store = await store_factory(owner_id=owner.id)
        values = (3, 3, 3, 3, 3, 2, 2, 2)
        for rater, value in zip(await _raters(user_factory, 8), values, strict=True):
            await rating_factory(user_id=rater.id, store_id=store.id, rating=value)

        stats = await StatisticsService(db_session).store_statistics(store.id)

        assert stats.average_rating == 2.63

    @pytest.mark.asyncio
    async def test_scoped_to_store(
        self,
        db_session: AsyncSession,
        owner: User,
        normal_user: User,
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        rated = await store_factory(owner_id=owner.id)
        other = await store_factory(owner_id=owner.id)
        await rating_factory(user_id=normal_user.id, store_id=rated.id, rating=1)

        stats = await StatisticsService(db_session).store_statistics(other.id)

        assert stats.total_ratings == 0


class TestSystemStatistics:
    """Tests for StatisticsService.system_statistics() and rating_distribution()."""

    @pytest.mark.asyncio
    async def test_empty(self, db_session: AsyncSession) -> None:
        stats = await StatisticsService(db_session).system_statistics()

        assert stats.total_ratings == 0
        assert stats.overall_average_rating == 0
        assert stats.five_star_count == 0
        assert stats.one_star_count == 0

    @pytest.mark.asyncio
    async def test_histogram(
        self,
        db_session: AsyncSession,
        owner: User,
        user_factory: Callable[..., Any],
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        store = await store_factory(owner_id=owner.id)
        for rater, value in zip(await _raters(user_factory, 4), (5, 5, 1, 3), strict=True):
            await rating_factory(user_id=rater.id, store_id=store.id, rating=value)

        service = StatisticsService(db_session)
        stats = await service.system_statistics()

        assert stats.total_ratings == 4
        assert stats.overall_average_rating == 3.5
        assert stats.five_star_count == 2
        assert stats.four_star_count == 0
        assert stats.three_star_count == 1
        assert stats.two_star_count == 0
        assert stats.one_star_count == 1

        distribution = await service.rating_distribution()
        assert [(d.rating, d.count) for d in distribution] == [
            (5, 2),
            (4, 0),
            (3, 1),
            (2, 0),
            (1, 1),
        ]


class TestTopStores:
    """Tests for StatisticsService.top_stores()."""

    @pytest.mark.asyncio
    async def test_requires_minimum_ratings_and_orders(
        self,
        db_session: AsyncSession,
        owner: User,
        user_factory: Callable[..., Any],
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        raters = await _raters(user_factory, 4)
        few = await store_factory(owner_id=owner.id, name="Few Ratings Store Name")
        good = await store_factory(owner_id=owner.id, name="Good Ratings Store Name")
        busy = await store_factory(owner_id=owner.id, name="Busy Ratings Store Name")
        best = await store_factory(owner_id=owner.id, name="Best Ratings Store Name")

        await rating_factory(user_id=raters[0].id, store_id=few.id, rating=5)
        for rater in raters[:3]:
            await rating_factory(user_id=rater.id, store_id=good.id, rating=4)
        for rater in raters:
            await rating_factory(user_id=rater.id, store_id=busy.id, rating=4)
        for rater in raters[:3]:
            await rating_factory(user_id=rater.id, store_id=best.id, rating=5)

        top = await StatisticsService(db_session).top_stores(n=5, min_ratings=3)

        # Equal averages fall back to rating count, highest first
        assert [s.id for s in top] == [best.id, busy.id, good.id]
        assert top[0].average_rating == 5.0
        assert top[1].total_ratings == 4

    @pytest.mark.asyncio
    async def test_limit(
        self,
        db_session: AsyncSession,
        owner: User,
        normal_user: User,
        store_factory: Callable[..., Any],
        rating_factory: Callable[..., Any],
    ) -> None:
        for _ in range(3):
            store = await store_factory(owner_id=owner.id)
            await rating_factory(user_id=normal_user.id, store_id=store.id, rating=3)

        top = await StatisticsService(db_session).top_stores(n=2, min_ratings=1)

        assert len(top) == 2


class TestUserStatistics:
    @pytest.mark.asyncio
    async def test_counts(
        self,
        db_session: AsyncSession,
        user_factory: Callable[..., Any],
    ) -> None:
        await user_factory(role=UserRole.SYSTEM_ADMIN)
        await user_factory(role=UserRole.STORE_OWNER)
        await user_factory(role=UserRole.STORE_OWNER)
        await user_factory()

        stats = await StatisticsService(db_session).user_statistics()

        assert stats.total_users == 4
        assert stats.normal_users == 1
        assert stats.store_owners == 2
        assert stats.system_admins == 1


def test_round_average() -> None:
    assert round_average(None) == 0.0
    assert round_average(4) == 4.0
    assert round_average(3.14159) == 3.14
    assert round_average(2.625) == 2.63
    assert round_average(4.125) == 4.13
    assert round_average(Decimal("3.3750000000000000")) == 3.38
