"""Response envelope and pagination shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from staybook.config import settings

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """``{"success": true, "message": ..., "data": ...}``"""

    success: bool = True
    message: str
    data: DataT | None = None


class ErrorResponse(BaseModel):
    """``{"success": false, "error": ...}`` returned for every failure."""

    success: bool = False
    error: str
    details: list[dict] | None = None


class PageParams(BaseModel):
    """``page``/``limit`` query parameters."""

    page: int = Field(1, ge=1, description="Page number, starting at 1")
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page")


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool
