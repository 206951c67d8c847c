"""Rating submission, listing and moderation endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from storerate.core.deps import AdminUser, CurrentUser, DBSession, RaterUser
from storerate.core.exceptions import ValidationFailed
from storerate.core.permissions import ensure_rating_owner_or_admin
from storerate.core.validation import STORE_ID_REQUIRED, validate_rating
from storerate.schemas.common import ApiResponse, ok
from storerate.schemas.rating import (
    AdminRatingListData,
    OwnRatingData,
    OwnRatingListData,
    RatingData,
    RatingResponse,
    RatingSubmit,
    RatingUpdate,
    StoreRatingListData,
)
from storerate.schemas.stats import SystemRatingStats
from storerate.services.listing import SortOrder
from storerate.services.rating_service import RatingService
from storerate.services.statistics_service import StatisticsService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[RatingData],
    summary="Rate a store",
    description="Submit a 1-5 rating, replacing the caller's earlier rating of the same store.",
)
async def submit_rating(
    data: RatingSubmit,
    user: RaterUser,
    db: DBSession,
) -> ApiResponse[RatingData]:
    validate_rating(data.rating, data.store_id)
    if data.store_id is None:
        raise ValidationFailed([STORE_ID_REQUIRED])

    rating, created = await RatingService(db).upsert_rating(
        user.id, data.store_id, int(data.rating)
    )
    message = "Rating submitted successfully" if created else "Rating updated successfully"
    return ok(message, RatingData(rating=RatingResponse.model_validate(rating)))


@router.get(
    "",
    response_model=ApiResponse[AdminRatingListData],
    summary="List all ratings",
)
async def list_all_ratings(
    _admin: AdminUser,
    db: DBSession,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> ApiResponse[AdminRatingListData]:
    ratings = await RatingService(db).list_all_ratings(
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.DESC),
    )
    return ok(
        "All ratings retrieved successfully",
        AdminRatingListData(ratings=ratings, total=len(ratings)),
    )


@router.get(
    "/stats",
    response_model=ApiResponse[SystemRatingStats],
    summary="Rating statistics",
)
async def rating_stats(_admin: AdminUser, db: DBSession) -> ApiResponse[SystemRatingStats]:
    stats = await StatisticsService(db).system_statistics()
    return ok("Rating statistics retrieved successfully", stats)


@router.get(
    "/user",
    response_model=ApiResponse[OwnRatingListData],
    summary="My ratings",
)
async def list_my_ratings(
    user: CurrentUser,
    db: DBSession,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> ApiResponse[OwnRatingListData]:
    ratings = await RatingService(db).list_user_ratings(
        user.id,
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.DESC),
    )
    return ok(
        "User ratings retrieved successfully",
        OwnRatingListData(ratings=ratings, total=len(ratings)),
    )


@router.get(
    "/user/{store_id}",
    response_model=ApiResponse[OwnRatingData],
    summary="My rating for a store",
)
async def get_my_rating(
    store_id: UUID,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[OwnRatingData]:
    rating = await RatingService(db).get_user_rating(user.id, store_id)
    return ok("Rating retrieved successfully", OwnRatingData(rating=rating))


@router.get(
    "/store/{store_id}",
    response_model=ApiResponse[StoreRatingListData],
    summary="Ratings of a store",
    description="Every rating of a store with rater names, plus the store's statistics.",
)
async def list_store_ratings(
    store_id: UUID,
    _user: CurrentUser,
    db: DBSession,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> ApiResponse[StoreRatingListData]:
    ratings, statistics = await RatingService(db).list_store_ratings(
        store_id,
        sort_by=sort_by,
        sort_order=SortOrder.parse(sort_order, SortOrder.DESC),
    )
    return ok(
        "Store ratings retrieved successfully",
        StoreRatingListData(ratings=ratings, statistics=statistics, total=len(ratings)),
    )


@router.put(
    "/{rating_id}",
    response_model=ApiResponse[RatingData],
    summary="Update rating",
    description="Change the score of a rating. Only its author or an admin may do this.",
)
async def update_rating(
    rating_id: UUID,
    data: RatingUpdate,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[RatingData]:
    rating = await ensure_rating_owner_or_admin(db, user, rating_id)
    validate_rating(data.rating, require_store=False)

    updated = await RatingService(db).update_rating(rating, int(data.rating))
    return ok("Rating updated successfully", RatingData(rating=RatingResponse.model_validate(updated)))


@router.delete(
    "/{rating_id}",
    response_model=ApiResponse[None],
    summary="Delete rating",
)
async def delete_rating(
    rating_id: UUID,
    user: CurrentUser,
    db: DBSession,
) -> ApiResponse[None]:
    rating = await ensure_rating_owner_or_admin(db, user, rating_id)
    await RatingService(db).delete_rating(rating)
    return ok("Rating deleted successfully")
