"""SQLAlchemy models."""

from storerate.models.base import Base
from storerate.models.rating import MAX_RATING, MIN_RATING, Rating
from storerate.models.store import Store
from storerate.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    # Users
    "User",
    "UserRole",
    # Stores
    "Store",
    # Ratings
    "Rating",
    "MIN_RATING",
    "MAX_RATING",
]
