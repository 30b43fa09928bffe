"""
===============================================================================
MODULE: Pagination helpers (page/limit)
===============================================================================

List operations page by 1-based page number and page size:
- offset_for(page, limit) -> rows to skip
- Page[T]: {data, total, page, limit} with page and limit echoed verbatim
===============================================================================
"""

from __future__ import annotations

from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class Page(BaseModel, Generic[T]):
    data: List[T] = Field(description="Items on the current page")
    total: int = Field(description="Size of the full (role-scoped) set")
    page: int = Field(description="Requested page number, echoed")
    limit: int = Field(description="Requested page size, echoed")


def offset_for(page: int, limit: int) -> int:
    """Rows to skip for a 1-based page; never negative."""
    return max(0, (int(page) - 1) * int(limit))
