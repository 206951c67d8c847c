"""Common Pydantic schemas used across the API."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler, model_serializer


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ApiResponse[T](BaseSchema):
    """Envelope wrapping every response body.

    ``data`` and ``errors`` are omitted from the JSON when unset.
    """

    success: bool
    message: str
    data: T | None = None
    errors: list[str] | None = None

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload: dict[str, Any] = handler(self)
        for key in ("data", "errors"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


class HealthResponse(BaseSchema):
    """Health check response schema."""

    status: str
    version: str
    environment: str
    checks: dict[str, str]


class Pagination(BaseSchema):
    """Page bookkeeping returned with paginated lists."""

    current_page: int
    total_pages: int
    total: int
    limit: int

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit > 0 else 0,
            total=total,
            limit=limit,
        )


def ok[T](message: str, data: T | None = None) -> ApiResponse[T]:
    """Build a successful envelope."""
    return ApiResponse(success=True, message=message, data=data)
