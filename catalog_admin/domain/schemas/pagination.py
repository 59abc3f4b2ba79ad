import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from catalog_admin.core.config import settings

T = TypeVar("T")


class OffsetPaginationRequest(BaseModel):
    """Request parameters for page/limit pagination"""

    page: int = Field(default=1, ge=1, description="1-based page number")
    limit: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Number of items to return",
    )

    def get_offset(self) -> int:
        return (self.page - 1) * self.limit


class OffsetPaginationResponse(BaseModel, Generic[T]):
    """Response for page/limit pagination"""

    items: list[T]
    total_count: int
    page: int
    per_page: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, items: list[T], *, page: int, per_page: int, total_count: int) -> "OffsetPaginationResponse[T]":
        total_pages = math.ceil(total_count / per_page) if per_page else 0
        return cls(
            items=items,
            total_count=total_count,
            page=page,
            per_page=per_page,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )
