"""Pydantic schemas for request/response validation."""

from storerate.schemas.common import ApiResponse, HealthResponse, Pagination, ok

__all__ = [
    "ApiResponse",
    "HealthResponse",
    "Pagination",
    "ok",
]
