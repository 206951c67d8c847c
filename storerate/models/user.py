"""User model covering all three platform roles."""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storerate.models.base import Base

if TYPE_CHECKING:
    from storerate.models.rating import Rating
    from storerate.models.store import Store


class UserRole(str, enum.Enum):
    """Capability level of a user. A user holds exactly one at a time."""

    NORMAL_USER = "normal_user"
    STORE_OWNER = "store_owner"
    SYSTEM_ADMIN = "system_admin"


class User(Base):
    """A registered person: shopper, store owner or administrator."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(60), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    # bcrypt hash, never the plain password
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    address: Mapped[str] = mapped_column(String(400), nullable=False)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.NORMAL_USER,
        nullable=False,
        index=True,
    )

    # Relationships (unloaded rows are removed by ON DELETE CASCADE)
    stores: Mapped[list["Store"]] = relationship(
        "Store",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    ratings: Mapped[list["Rating"]] = relationship(
        "Rating",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
