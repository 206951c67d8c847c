"""Store model. Stores are created and removed by administrators only."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storerate.models.base import Base

if TYPE_CHECKING:
    from storerate.models.rating import Rating
    from storerate.models.user import User


class Store(Base):
    """A rateable store, optionally linked to the user who owns it."""

    __tablename__ = "stores"

    name: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(400), nullable=False)

    owner_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Relationships
    owner: Mapped["User | None"] = relationship("User", back_populates="stores")
    ratings: Mapped[list["Rating"]] = relationship(
        "Rating",
        back_populates="store",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Store {self.name} ({self.email})>"
