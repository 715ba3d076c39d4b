"""Pagination primitives shared by every list operation."""

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    """Normalized page request.

    ``page`` is 1-based; anything missing or below 1 becomes 1. ``limit``
    defaults to 10 when missing or zero and is clamped to [1, 100].
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @classmethod
    def from_params(cls, page: int | None = None, limit: int | None = None) -> "Pagination":
        normalized_page = page if page and page > 0 else 1
        normalized_limit = limit if limit else DEFAULT_PAGE_LIMIT
        normalized_limit = max(1, min(normalized_limit, MAX_PAGE_LIMIT))
        return cls(page=normalized_page, limit=normalized_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PaginationInfo:
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, pagination: Pagination, total: int) -> "PaginationInfo":
        return cls(
            page=pagination.page,
            limit=pagination.limit,
            total=total,
            pages=math.ceil(total / pagination.limit),
        )


@dataclass
class PaginatedResult(Generic[T]):
    data: list[T] = field(default_factory=list)
    pagination: PaginationInfo = field(
        default_factory=lambda: PaginationInfo(page=1, limit=DEFAULT_PAGE_LIMIT, total=0, pages=0)
    )
