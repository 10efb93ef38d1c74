"""
Offset pagination helpers shared by repositories.

Repositories receive ``PageOptions`` (1-based page number and page size),
compute the SQL offset with :func:`calculate_offset` and describe the
position of the returned page with :func:`calculate_page_result`.

``PageInfo.next_page`` is the page to request next, or ``LAST_PAGE`` (-1)
when there is nothing left to read.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

LAST_PAGE = -1


@dataclass(frozen=True)
class PageOptions:
    limit: int
    page: int = 1

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError("limit must be a positive integer")


@dataclass(frozen=True)
class PageInfo:
    next_page: int
    total_of_pages: int

    @property
    def is_last(self) -> bool:
        return self.next_page == LAST_PAGE


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """Rows of one page; ``page_result`` is None when no paging was requested."""

    results: list[T] = field(default_factory=list)
    page_result: Optional[PageInfo] = None


def calculate_offset(page_options: PageOptions) -> int:
    return max(page_options.page - 1, 0) * page_options.limit


def calculate_page_result(total: int, page_options: PageOptions) -> PageInfo:
    if total <= 0:
        return PageInfo(next_page=LAST_PAGE, total_of_pages=0)

    total_of_pages = math.ceil(total / page_options.limit)
    next_page = page_options.page + 1 if page_options.page < total_of_pages else LAST_PAGE
    return PageInfo(next_page=next_page, total_of_pages=total_of_pages)
