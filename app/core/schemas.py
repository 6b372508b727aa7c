"""Shared response schemas.

Forum list endpoints return ``{<items>: [...], "pagination": {...}}`` and
failures return the error envelope produced by ``app.core.exceptions``.
"""

from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API payloads: snake_case attributes, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    current: int = Field(..., ge=1, description="Current page number")
    pages: int = Field(..., ge=0, description="Total number of pages")
    total: int = Field(..., ge=0, description="Total number of items")
    limit: int = Field(..., ge=1, description="Items per page")

    @classmethod
    def from_query(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        """Create pagination meta from query parameters.

        Args:
            total: Total number of items.
            page: Current page number (1-indexed).
            limit: Items per page.

        Returns:
            PaginationMeta instance.
        """
        pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(current=page, pages=pages, total=total, limit=limit)


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(None, description="Additional error context")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    error: ErrorDetail
