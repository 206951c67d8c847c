"""Rating model: one 1-5 star score per user per store."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storerate.models.base import Base

if TYPE_CHECKING:
    from storerate.models.store import Store
    from storerate.models.user import User

MIN_RATING = 1
MAX_RATING = 5


class Rating(Base):
    """A user's score for a store.

    Submitting again for the same store updates this row; the unique
    constraint backs that up when two submissions race.
    """

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id"),
        CheckConstraint(f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}", name="rating_range"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="ratings")
    store: Mapped["Store"] = relationship("Store", back_populates="ratings")

    def __repr__(self) -> str:
        return f"<Rating {self.rating} store={self.store_id} user={self.user_id}>"
