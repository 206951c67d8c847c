"""Pydantic schemas for ratings."""

from datetime import datetime
from uuid import UUID

from pydantic import StrictInt

from storerate.schemas.common import BaseSchema
from storerate.schemas.stats import StoreStatistics


class RatingSubmit(BaseSchema):
    """Submit or replace the caller's rating for a store."""

    store_id: UUID | None = None
    rating: StrictInt | str = ""


class RatingUpdate(BaseSchema):
    rating: StrictInt | str = ""


class RatingResponse(BaseSchema):
    id: UUID
    user_id: UUID
    store_id: UUID
    rating: int
    created_at: datetime
    updated_at: datetime


class RatingData(BaseSchema):
    rating: RatingResponse


class OwnRatingItem(BaseSchema):
    """One of the caller's ratings with the store it is for."""

    id: UUID
    store_id: UUID
    rating: int
    created_at: datetime
    updated_at: datetime
    store_name: str
    store_email: str
    store_address: str


class OwnRatingData(BaseSchema):
    rating: OwnRatingItem


class OwnRatingListData(BaseSchema):
    ratings: list[OwnRatingItem]
    total: int


class AdminRatingItem(BaseSchema):
    id: UUID
    rating: int
    created_at: datetime
    updated_at: datetime
    user_id: UUID
    user_name: str
    user_email: str
    store_id: UUID
    store_name: str
    store_email: str


class AdminRatingListData(BaseSchema):
    ratings: list[AdminRatingItem]
    total: int


class PublicRatingItem(BaseSchema):
    """A rating as listed publicly for a store: rater name only."""

    id: UUID
    rating: int
    created_at: datetime
    updated_at: datetime
    user_name: str


class StoreRatingListData(BaseSchema):
    ratings: list[PublicRatingItem]
    statistics: StoreStatistics
    total: int
