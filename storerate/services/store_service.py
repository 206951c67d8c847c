"""Store management, listings and owner-facing rating pages.

Creating and deleting a store also moves its owner between the
``normal_user`` and ``store_owner`` roles. Both steps run in one transaction:
``_promote_owner`` / ``_demote_owner_if_storeless`` are the second half of
``create_store`` / ``delete_store`` and are never committed on their own.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, assert_never

from sqlalchemy import ColumnElement, and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from storerate.core.exceptions import BadRequest, Conflict, NotFound
from storerate.core.security import hash_password
from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User, UserRole
from storerate.schemas.store import (
    AdminStoreListItem,
    StoreDetail,
    StoreListItem,
    StoreRatingItem,
    StoreSummary,
)
from storerate.services.listing import (
    PageParams,
    RatingSortField,
    SortOrder,
    StoreSortField,
    apply_sort,
    contains_filter,
    resolve_sort_column,
    where_all,
)
from storerate.services.statistics_service import (
    StatisticsService,
    round_average,
    store_rating_aggregates,
)

logger = logging.getLogger(__name__)

STORE_EMAIL_TAKEN = "Store with this email already exists"


@dataclass(frozen=True)
class StoreFilters:
    name: str | None = None
    email: str | None = None
    address: str | None = None

    def conditions(self) -> list[ColumnElement[bool] | None]:
        return [
            contains_filter(Store.name, self.name),
            contains_filter(Store.email, self.email),
            contains_filter(Store.address, self.address),
        ]


class StoreService:
    """Repository-style operations on stores."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # === Listings ===

    async def _count_stores(self, filters: StoreFilters) -> int:
        stmt = where_all(select(func.count()).select_from(Store), *filters.conditions())
        return await self.db.scalar(stmt) or 0

    async def list_stores(
        self,
        user_id: uuid.UUID,
        filters: StoreFilters,
        page: PageParams,
        *,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> tuple[list[StoreListItem], int]:
        """Page of stores with live aggregates and ``user_id``'s own rating.

        Returns:
            Tuple of (stores, total matching count)
        """
        agg = store_rating_aggregates()
        own = aliased(Rating)
        average = func.coalesce(agg.c.average_rating, 0)
        total = func.coalesce(agg.c.total_ratings, 0)

        stmt = (
            select(
                Store,
                average.label("average_rating"),
                total.label("total_ratings"),
                own.rating.label("user_rating"),
            )
            .outerjoin(agg, agg.c.store_id == Store.id)
            .outerjoin(own, and_(own.store_id == Store.id, own.user_id == user_id))
        )
        stmt = where_all(stmt, *filters.conditions())

        columns: dict[StoreSortField, ColumnElement[Any]] = {
            StoreSortField.NAME: Store.name,
            StoreSortField.ADDRESS: Store.address,
            StoreSortField.AVERAGE_RATING: average,
            StoreSortField.CREATED_AT: Store.created_at,
        }
        sort_column = resolve_sort_column(columns, sort_by, StoreSortField.NAME)
        stmt = apply_sort(stmt, sort_column, sort_order, Store.id)
        stmt = stmt.limit(page.limit).offset(page.offset)

        result = await self.db.execute(stmt)
        items = [
            StoreListItem(
                id=store.id,
                name=store.name,
                email=store.email,
                address=store.address,
                created_at=store.created_at,
                average_rating=round_average(avg),
                total_ratings=count,
                user_rating=user_rating,
            )
            for store, avg, count, user_rating in result.all()
        ]
        return items, await self._count_stores(filters)

    async def list_stores_for_admin(
        self,
        filters: StoreFilters,
        page: PageParams,
        *,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> tuple[list[AdminStoreListItem], int]:
        """Page of stores with live aggregates and owner contact details."""
        agg = store_rating_aggregates()
        average = func.coalesce(agg.c.average_rating, 0)
        total = func.coalesce(agg.c.total_ratings, 0)

        stmt = (
            select(
                Store,
                average.label("average_rating"),
                total.label("total_ratings"),
                User.name.label("owner_name"),
                User.email.label("owner_email"),
            )
            .outerjoin(agg, agg.c.store_id == Store.id)
            .outerjoin(User, User.id == Store.owner_id)
        )
        stmt = where_all(stmt, *filters.conditions())

        columns: dict[StoreSortField, ColumnElement[Any]] = {
            StoreSortField.NAME: Store.name,
            StoreSortField.EMAIL: Store.email,
            StoreSortField.ADDRESS: Store.address,
            StoreSortField.AVERAGE_RATING: average,
            StoreSortField.CREATED_AT: Store.created_at,
        }
        sort_column = resolve_sort_column(columns, sort_by, StoreSortField.NAME)
        stmt = apply_sort(stmt, sort_column, sort_order, Store.id)
        stmt = stmt.limit(page.limit).offset(page.offset)

        result = await self.db.execute(stmt)
        items = [
            AdminStoreListItem(
                id=store.id,
                name=store.name,
                email=store.email,
                address=store.address,
                created_at=store.created_at,
                average_rating=round_average(avg),
                total_ratings=count,
                owner_id=store.owner_id,
                owner_name=owner_name,
                owner_email=owner_email,
            )
            for store, avg, count, owner_name, owner_email in result.all()
        ]
        return items, await self._count_stores(filters)

    async def get_store_detail(self, store_id: uuid.UUID, user_id: uuid.UUID) -> StoreDetail:
        """One store with aggregates, the caller's rating and the owner's name.

        Raises:
            NotFound: If the store does not exist
        """
        own = aliased(Rating)
        stmt = (
            select(Store, own.rating, User.name)
            .outerjoin(own, and_(own.store_id == Store.id, own.user_id == user_id))
            .outerjoin(User, User.id == Store.owner_id)
            .where(Store.id == store_id)
        )
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None:
            raise NotFound("Store not found")
        store, user_rating, owner_name = row

        stats = await StatisticsService(self.db).store_statistics(store_id)
        return StoreDetail(
            id=store.id,
            name=store.name,
            email=store.email,
            address=store.address,
            created_at=store.created_at,
            average_rating=stats.average_rating,
            total_ratings=stats.total_ratings,
            user_rating=user_rating,
            owner_name=owner_name,
        )

    async def get_store_ratings(
        self,
        store_id: uuid.UUID,
        page: PageParams,
        *,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> tuple[StoreSummary, list[StoreRatingItem], int]:
        """Store summary plus one page of its ratings with rater contact details.

        Callers must have passed ``ensure_store_owner_or_admin`` first.

        Raises:
            NotFound: If the store does not exist
        """
        store = await self.db.get(Store, store_id)
        if store is None:
            raise NotFound("Store not found")

        stats = await StatisticsService(self.db).store_statistics(store_id)
        summary = StoreSummary(
            id=store.id,
            name=store.name,
            email=store.email,
            average_rating=stats.average_rating,
            total_ratings=stats.total_ratings,
        )

        columns: dict[RatingSortField, ColumnElement[Any]] = {
            RatingSortField.RATING: Rating.rating,
            RatingSortField.CREATED_AT: Rating.created_at,
            RatingSortField.UPDATED_AT: Rating.updated_at,
        }
        sort_column = resolve_sort_column(columns, sort_by, RatingSortField.CREATED_AT)
        stmt = (
            select(Rating, User.name, User.email)
            .join(User, User.id == Rating.user_id)
            .where(Rating.store_id == store_id)
        )
        stmt = apply_sort(stmt, sort_column, sort_order, Rating.id)
        stmt = stmt.limit(page.limit).offset(page.offset)

        result = await self.db.execute(stmt)
        ratings = [
            StoreRatingItem(
                id=rating.id,
                rating=rating.rating,
                created_at=rating.created_at,
                updated_at=rating.updated_at,
                user_name=user_name,
                user_email=user_email,
            )
            for rating, user_name, user_email in result.all()
        ]
        return summary, ratings, stats.total_ratings

    # === Mutations ===

    async def _email_in_use(self, email: str, exclude_id: uuid.UUID | None = None) -> bool:
        stmt = select(Store.id).where(Store.email == email)
        if exclude_id is not None:
            stmt = stmt.where(Store.id != exclude_id)
        return await self.db.scalar(stmt) is not None

    def _promote_owner(self, owner: User, password: str | None) -> bool:
        """Make ``owner`` a store owner, optionally resetting their password.

        Returns True if the role changed. Admins are promoted too, matching the
        rule that every store's owner holds the store_owner role.
        """
        match owner.role:
            case UserRole.STORE_OWNER:
                return False
            case UserRole.SYSTEM_ADMIN:
                logger.warning("Admin %s becomes a store owner and loses admin access", owner.id)
            case UserRole.NORMAL_USER:
                pass
            case _ as unreachable:
                assert_never(unreachable)

        owner.role = UserRole.STORE_OWNER
        if password:
            owner.password = hash_password(password)
        return True

    async def _demote_owner_if_storeless(self, owner_id: uuid.UUID) -> bool:
        """Revert a store owner with no remaining stores to normal user.

        Returns True if the role changed.
        """
        remaining = await self.db.scalar(
            select(func.count()).select_from(Store).where(Store.owner_id == owner_id)
        )
        if remaining:
            return False

        owner = await self.db.get(User, owner_id)
        if owner is None:
            return False

        match owner.role:
            case UserRole.STORE_OWNER:
                owner.role = UserRole.NORMAL_USER
                return True
            case UserRole.NORMAL_USER | UserRole.SYSTEM_ADMIN:
                return False
            case _ as unreachable:
                assert_never(unreachable)

    async def create_store(
        self,
        *,
        name: str,
        email: str,
        address: str,
        owner_id: uuid.UUID | None,
        password: str | None = None,
    ) -> Store:
        """Create a store and promote its owner, atomically.

        Raises:
            Conflict: If another store already uses ``email``
            BadRequest: If ``owner_id`` is missing or not an existing user
        """
        email = email.strip()
        if await self._email_in_use(email):
            raise Conflict(STORE_EMAIL_TAKEN)

        owner = await self.db.get(User, owner_id) if owner_id is not None else None
        if owner is None:
            raise BadRequest("Store owner not found")

        store = Store(name=name.strip(), email=email, address=address.strip(), owner_id=owner.id)
        try:
            promoted = self._promote_owner(owner, password)
            self.db.add(store)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict(STORE_EMAIL_TAKEN)
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(store)
        logger.info(
            "Created store %s for owner %s%s",
            store.id,
            owner_id,
            " (promoted to store_owner)" if promoted else "",
        )
        return store

    async def update_store(
        self,
        store_id: uuid.UUID,
        *,
        name: str,
        email: str,
        address: str,
    ) -> Store:
        """Replace a store's name, email and address.

        Raises:
            NotFound: If the store does not exist
            Conflict: If another store already uses ``email``
        """
        store = await self.db.get(Store, store_id)
        if store is None:
            raise NotFound("Store not found")

        email = email.strip()
        if await self._email_in_use(email, exclude_id=store_id):
            raise Conflict("Email is already taken by another store")

        store.name = name.strip()
        store.email = email
        store.address = address.strip()
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Email is already taken by another store")

        await self.db.refresh(store)
        return store

    async def delete_store(self, store_id: uuid.UUID) -> None:
        """Delete a store (and its ratings) and demote a storeless owner, atomically.

        Raises:
            NotFound: If the store does not exist
        """
        store = await self.db.get(Store, store_id)
        if store is None:
            raise NotFound("Store not found")

        owner_id = store.owner_id
        demoted = False
        try:
            await self.db.delete(store)
            await self.db.flush()
            if owner_id is not None:
                demoted = await self._demote_owner_if_storeless(owner_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Deleted store %s%s",
            store_id,
            f" (owner {owner_id} reverted to normal_user)" if demoted else "",
        )
