"""
Shared DTOs

Paging request/response shapes used by every service boundary.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

MAX_MAX_RESULT_COUNT = 1000
DEFAULT_MAX_RESULT_COUNT = 10


class ListResultDto(BaseModel, Generic[T]):
    """List of items"""
    items: List[T] = Field(default_factory=list)


class PagedResultDto(BaseModel, Generic[T]):
    """One page of items plus the total number of matches"""
    total_count: int = 0
    items: List[T] = Field(default_factory=list)


class PagedResultRequest(BaseModel):
    """Paging input"""
    skip_count: int = Field(0, ge=0, description="Number of items to skip")
    max_result_count: int = Field(
        DEFAULT_MAX_RESULT_COUNT,
        ge=1,
        le=MAX_MAX_RESULT_COUNT,
        description="Page size"
    )


class PagedAndSortedResultRequest(PagedResultRequest):
    """Paging and sorting input"""
    sorting: Optional[str] = Field(
        None,
        max_length=256,
        description="Sorting expression, e.g. 'userName desc, email'"
    )


__all__ = [
    "ListResultDto",
    "PagedResultDto",
    "PagedResultRequest",
    "PagedAndSortedResultRequest",
    "MAX_MAX_RESULT_COUNT",
    "DEFAULT_MAX_RESULT_COUNT",
]
