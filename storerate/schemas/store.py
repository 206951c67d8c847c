"""Pydantic schemas for stores and the ratings shown to their owners."""

from datetime import datetime
from uuid import UUID

from storerate.schemas.common import BaseSchema, Pagination

# === Store CRUD Schemas ===


class StoreCreate(BaseSchema):
    """Admin request creating a store for an existing user.

    ``password`` optionally resets the owner's password when they are promoted.
    """

    name: str = ""
    email: str = ""
    address: str = ""
    owner_id: UUID | None = None
    password: str = ""


class StoreUpdate(BaseSchema):
    name: str = ""
    email: str = ""
    address: str = ""


class StoreResponse(BaseSchema):
    """Schema for a stored store row."""

    id: UUID
    name: str
    email: str
    address: str
    owner_id: UUID | None
    created_at: datetime
    updated_at: datetime


class StoreData(BaseSchema):
    store: StoreResponse


# === Listing Schemas ===


class StoreListItem(BaseSchema):
    """Store row with live rating aggregates and the caller's own rating."""

    id: UUID
    name: str
    email: str
    address: str
    created_at: datetime
    average_rating: float
    total_ratings: int
    user_rating: int | None = None


class AdminStoreListItem(BaseSchema):
    """Store row with live rating aggregates and owner contact details."""

    id: UUID
    name: str
    email: str
    address: str
    created_at: datetime
    average_rating: float
    total_ratings: int
    owner_id: UUID | None = None
    owner_name: str | None = None
    owner_email: str | None = None


class StoreDetail(StoreListItem):
    owner_name: str | None = None


class StoreDetailData(BaseSchema):
    store: StoreDetail


class StoreListData(BaseSchema):
    stores: list[StoreListItem]
    pagination: Pagination


class AdminStoreListData(BaseSchema):
    stores: list[AdminStoreListItem]
    pagination: Pagination


# === Owner Feedback Schemas ===


class StoreSummary(BaseSchema):
    id: UUID
    name: str
    email: str
    average_rating: float
    total_ratings: int


class StoreRatingItem(BaseSchema):
    """A single rating as seen by the store's owner."""

    id: UUID
    rating: int
    created_at: datetime
    updated_at: datetime
    user_name: str
    user_email: str


class StoreRatingsPage(BaseSchema):
    store: StoreSummary
    ratings: list[StoreRatingItem]
    pagination: Pagination
