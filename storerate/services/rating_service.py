"""Rating submission, listing and moderation."""

import logging
import uuid
from typing import Any

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storerate.core.exceptions import NotFound
from storerate.models.base import utcnow
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User
from storerate.schemas.rating import AdminRatingItem, OwnRatingItem, PublicRatingItem
from storerate.schemas.stats import StoreStatistics
from storerate.services.listing import RatingSortField, SortOrder, apply_sort, resolve_sort_column
from storerate.services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)

_RATING_SORT_COLUMNS: dict[RatingSortField, ColumnElement[Any]] = {
    RatingSortField.RATING: Rating.rating,
    RatingSortField.CREATED_AT: Rating.created_at,
    RatingSortField.UPDATED_AT: Rating.updated_at,
}


def _sorted(stmt: Select[Any], sort_by: str | None, sort_order: SortOrder) -> Select[Any]:
    column = resolve_sort_column(_RATING_SORT_COLUMNS, sort_by, RatingSortField.CREATED_AT)
    return apply_sort(stmt, column, sort_order, Rating.id)


class RatingService:
    """Repository-style operations on ratings."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _find(self, user_id: uuid.UUID, store_id: uuid.UUID) -> Rating | None:
        stmt = select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def upsert_rating(
        self,
        user_id: uuid.UUID,
        store_id: uuid.UUID,
        value: int,
    ) -> tuple[Rating, bool]:
        """Create the user's rating for a store, or replace the score of the existing one.

        An insert that loses a race against a concurrent identical submission
        hits the (user_id, store_id) unique constraint and is retried as an
        update.

        Returns:
            Tuple of (rating, created)

        Raises:
            NotFound: If the store does not exist
        """
        if await self.db.scalar(select(Store.id).where(Store.id == store_id)) is None:
            raise NotFound("Store not found")

        existing = await self._find(user_id, store_id)
        if existing is None:
            rating = Rating(user_id=user_id, store_id=store_id, rating=value)
            self.db.add(rating)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                existing = await self._find(user_id, store_id)
                if existing is None:
                    raise
                logger.info("Concurrent rating insert for store %s; updating instead", store_id)
            else:
                await self.db.refresh(rating)
                return rating, True

        return await self.update_rating(existing, value), False

    async def update_rating(self, rating: Rating, value: int) -> Rating:
        """Set a new score. Callers must have authorized the change."""
        rating.rating = value
        rating.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(rating)
        return rating

    async def delete_rating(self, rating: Rating) -> None:
        """Remove a rating. Callers must have authorized the change."""
        rating_id = rating.id
        await self.db.delete(rating)
        await self.db.commit()
        logger.info("Deleted rating %s", rating_id)

    # === Listings ===

    async def get_user_rating(self, user_id: uuid.UUID, store_id: uuid.UUID) -> OwnRatingItem:
        """The user's rating for one store.

        Raises:
            NotFound: If the user has not rated that store
        """
        stmt = (
            select(Rating, Store)
            .join(Store, Store.id == Rating.store_id)
            .where(Rating.user_id == user_id, Rating.store_id == store_id)
        )
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None:
            raise NotFound("Rating not found")
        return _own_item(*row)

    async def list_user_ratings(
        self,
        user_id: uuid.UUID,
        *,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> list[OwnRatingItem]:
        stmt = (
            select(Rating, Store)
            .join(Store, Store.id == Rating.store_id)
            .where(Rating.user_id == user_id)
        )
        result = await self.db.execute(_sorted(stmt, sort_by, sort_order))
        return [_own_item(rating, store) for rating, store in result.all()]

    async def list_store_ratings(
        self,
        store_id: uuid.UUID,
        *,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> tuple[list[PublicRatingItem], StoreStatistics]:
        """All ratings for a store with rater names, plus the store's statistics.

        Raises:
            NotFound: If the store does not exist
        """
        if await self.db.scalar(select(Store.id).where(Store.id == store_id)) is None:
            raise NotFound("Store not found")

        stmt = (
            select(Rating, User.name)
            .join(User, User.id == Rating.user_id)
            .where(Rating.store_id == store_id)
        )
        result = await self.db.execute(_sorted(stmt, sort_by, sort_order))
        items = [
            PublicRatingItem(
                id=rating.id,
                rating=rating.rating,
                created_at=rating.created_at,
                updated_at=rating.updated_at,
                user_name=user_name,
            )
            for rating, user_name in result.all()
        ]
        stats = await StatisticsService(self.db).store_statistics(store_id)
        return items, stats

    async def list_all_ratings(
        self,
        *,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> list[AdminRatingItem]:
        stmt = (
            select(Rating, User, Store)
            .join(User, User.id == Rating.user_id)
            .join(Store, Store.id == Rating.store_id)
        )
        result = await self.db.execute(_sorted(stmt, sort_by, sort_order))
        return [
            AdminRatingItem(
                id=rating.id,
                rating=rating.rating,
                created_at=rating.created_at,
                updated_at=rating.updated_at,
                user_id=user.id,
                user_name=user.name,
                user_email=user.email,
                store_id=store.id,
                store_name=store.name,
                store_email=store.email,
            )
            for rating, user, store in result.all()
        ]


def _own_item(rating: Rating, store: Store) -> OwnRatingItem:
    return OwnRatingItem(
        id=rating.id,
        store_id=store.id,
        rating=rating.rating,
        created_at=rating.created_at,
        updated_at=rating.updated_at,
        store_name=store.name,
        store_email=store.email,
        store_address=store.address,
    )
