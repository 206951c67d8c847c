"""Rating and user statistics computed from live rows with SQL aggregation.

Nothing here is cached or persisted: each call reads the current ratings.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import Subquery, case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.models.rating import MAX_RATING, MIN_RATING, Rating
from storerate.models.store import Store
from storerate.models.user import User, UserRole
from storerate.schemas.stats import (
    RatingDistributionItem,
    StoreOverview,
    StoreStatistics,
    SystemRatingStats,
    TopStore,
)
from storerate.schemas.user import UserStats

logger = logging.getLogger(__name__)

TOP_STORES_LIMIT = 5
TOP_STORES_MIN_RATINGS = 3

_STAR_FIELDS = {
    1: "one_star_count",
    2: "two_star_count",
    3: "three_star_count",
    4: "four_star_count",
    5: "five_star_count",
}


def round_average(value: Any) -> float:
    """Round a SQL AVG result to 2 decimals, halves up; NULL (no ratings) becomes 0."""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def store_rating_aggregates() -> Subquery:
    """Per-store average and count, for outer-joining onto store listings."""
    return (
        select(
            Rating.store_id.label("store_id"),
            func.avg(Rating.rating).label("average_rating"),
            func.count(Rating.id).label("total_ratings"),
        )
        .group_by(Rating.store_id)
        .subquery("store_ratings")
    )


class StatisticsService:
    """Aggregates over ratings, stores and users."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def store_statistics(self, store_id: uuid.UUID) -> StoreStatistics:
        """Average and count of one store's ratings. Zero ratings gives 0 / 0."""
        stmt = select(
            func.avg(Rating.rating).label("average"),
            func.count(Rating.id).label("total"),
        ).where(Rating.store_id == store_id)
        row = (await self.db.execute(stmt)).one()
        return StoreStatistics(
            average_rating=round_average(row.average),
            total_ratings=row.total or 0,
        )

    async def system_statistics(self) -> SystemRatingStats:
        """Overall count, average, and a count for each star value."""
        star_counts = [
            func.count(case((Rating.rating == stars, 1), else_=None)).label(field)
            for stars, field in _STAR_FIELDS.items()
        ]
        stmt = select(
            func.count(Rating.id).label("total"),
            func.avg(Rating.rating).label("average"),
            *star_counts,
        )
        row = (await self.db.execute(stmt)).one()
        return SystemRatingStats(
            total_ratings=row.total or 0,
            overall_average_rating=round_average(row.average),
            **{field: getattr(row, field) or 0 for field in _STAR_FIELDS.values()},
        )

    async def rating_distribution(self) -> list[RatingDistributionItem]:
        """Count per star value, highest first. Values nobody used are reported as 0."""
        stmt = select(Rating.rating, func.count(Rating.id)).group_by(Rating.rating)
        counts = {stars: count for stars, count in (await self.db.execute(stmt)).all()}
        return [
            RatingDistributionItem(rating=stars, count=counts.get(stars, 0))
            for stars in range(MAX_RATING, MIN_RATING - 1, -1)
        ]

    async def top_stores(
        self,
        n: int = TOP_STORES_LIMIT,
        min_ratings: int = TOP_STORES_MIN_RATINGS,
    ) -> list[TopStore]:
        """Best-rated stores with at least ``min_ratings`` ratings.

        Ordered by average descending, then by rating count descending.
        """
        average = func.avg(Rating.rating)
        total = func.count(Rating.id)
        stmt = (
            select(
                Store.id,
                Store.name,
                Store.email,
                average.label("average_rating"),
                total.label("total_ratings"),
            )
            .join(Rating, Rating.store_id == Store.id)
            .group_by(Store.id, Store.name, Store.email)
            .having(total >= min_ratings)
            .order_by(average.desc(), total.desc(), Store.name.asc())
            .limit(n)
        )
        result = await self.db.execute(stmt)
        return [
            TopStore(
                id=row.id,
                name=row.name,
                email=row.email,
                average_rating=round_average(row.average_rating),
                total_ratings=row.total_ratings,
            )
            for row in result.all()
        ]

    async def user_statistics(self) -> UserStats:
        """Number of users holding each role, plus the total."""
        stmt = select(User.role, func.count(User.id)).group_by(User.role)
        counts: dict[UserRole, int] = dict((await self.db.execute(stmt)).tuples().all())
        return UserStats(
            total_users=sum(counts.values()),
            normal_users=counts.get(UserRole.NORMAL_USER, 0),
            store_owners=counts.get(UserRole.STORE_OWNER, 0),
            system_admins=counts.get(UserRole.SYSTEM_ADMIN, 0),
        )

    async def store_overview(self) -> StoreOverview:
        """Admin dashboard summary: store counts, rating totals, distribution, top stores."""
        stmt = select(
            func.count(distinct(Store.id)).label("total_stores"),
            func.count(distinct(Rating.store_id)).label("stores_with_ratings"),
            func.avg(Rating.rating).label("average"),
            func.count(Rating.id).label("total_ratings"),
        ).select_from(Store).outerjoin(Rating, Rating.store_id == Store.id)
        row = (await self.db.execute(stmt)).one()

        return StoreOverview(
            total_stores=row.total_stores or 0,
            stores_with_ratings=row.stores_with_ratings or 0,
            overall_average_rating=round_average(row.average),
            total_ratings=row.total_ratings or 0,
            rating_distribution=await self.rating_distribution(),
            top_stores=await self.top_stores(),
        )
