"""
Pagination query and result schemas
"""

from pydantic import BaseModel, Field
from typing import Generic, List, Literal, Optional, TypeVar

T = TypeVar("T")


class PageQuery(BaseModel):
    """Page, sort and search parameters shared by list endpoints"""
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: Optional[str] = None
    sort_order: Literal["ASC", "DESC", "asc", "desc"] = "DESC"
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order.upper() == "DESC"


class Page(BaseModel, Generic[T]):
    """One page of results"""
    data: List[T]
    total_elements: int
    total_pages: int
    has_next: bool
