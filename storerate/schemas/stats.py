"""Aggregate statistics schemas. Everything here is computed on read."""

from uuid import UUID

from storerate.schemas.common import BaseSchema


class StoreStatistics(BaseSchema):
    average_rating: float = 0.0
    total_ratings: int = 0


class RatingDistributionItem(BaseSchema):
    rating: int
    count: int


class SystemRatingStats(BaseSchema):
    """Platform-wide rating counts, average and a 1-5 histogram."""

    total_ratings: int = 0
    overall_average_rating: float = 0.0
    one_star_count: int = 0
    two_star_count: int = 0
    three_star_count: int = 0
    four_star_count: int = 0
    five_star_count: int = 0


class TopStore(BaseSchema):
    id: UUID
    name: str
    email: str
    average_rating: float
    total_ratings: int


class StoreOverview(BaseSchema):
    """Admin dashboard summary of stores and their ratings."""

    total_stores: int = 0
    stores_with_ratings: int = 0
    overall_average_rating: float = 0.0
    total_ratings: int = 0
    rating_distribution: list[RatingDistributionItem]
    top_stores: list[TopStore]
