"""Shared helpers for filtered, sorted and paginated list queries.

Sort keys are closed enums mapped to column expressions. Caller-supplied
strings are only ever compared against those enums, never placed in SQL.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, Select


class SortOrder(enum.StrEnum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str | None, default: "SortOrder") -> "SortOrder":
        """Case-insensitive lookup; anything unrecognised gives ``default``."""
        if value is None:
            return default
        try:
            return cls(value.strip().lower())
        except ValueError:
            return default


class UserSortField(enum.StrEnum):
    NAME = "name"
    EMAIL = "email"
    ADDRESS = "address"
    ROLE = "role"
    CREATED_AT = "created_at"


class StoreSortField(enum.StrEnum):
    NAME = "name"
    EMAIL = "email"
    ADDRESS = "address"
    AVERAGE_RATING = "average_rating"
    CREATED_AT = "created_at"


class RatingSortField(enum.StrEnum):
    RATING = "rating"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def resolve_sort_column[F: enum.StrEnum](
    columns: Mapping[F, ColumnElement[Any]],
    requested: str | None,
    default: F,
) -> ColumnElement[Any]:
    """Map a requested sort key to its column, falling back to ``default``.

    Unknown keys, and keys that exist but are not offered by this listing, fall
    back silently.
    """
    for field, column in columns.items():
        if requested == field.value:
            return column
    return columns[default]


def apply_sort(
    stmt: Select[Any],
    column: ColumnElement[Any],
    order: SortOrder,
    *tiebreakers: ColumnElement[Any],
) -> Select[Any]:
    primary = column.desc() if order is SortOrder.DESC else column.asc()
    return stmt.order_by(primary, *tiebreakers)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_filter(column: ColumnElement[Any], term: str | None) -> ColumnElement[bool] | None:
    """Case-insensitive substring match, or None when the term is empty."""
    if term is None or not term.strip():
        return None
    return column.ilike(f"%{_escape_like(term.strip())}%", escape="\\")


def where_all(stmt: Select[Any], *conditions: ColumnElement[bool] | None) -> Select[Any]:
    """Apply each non-None condition to ``stmt``."""
    for condition in conditions:
        if condition is not None:
            stmt = stmt.where(condition)
    return stmt
