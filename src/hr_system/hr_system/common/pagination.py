from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "PageRequest":
        """Lenient parsing of ``?page=&limit=``; bad values fall back to defaults."""

        def _int(key: str, default: int) -> int:
            try:
                return int(args.get(key) or default)
            except (TypeError, ValueError):
                return default

        page = max(_int("page", DEFAULT_PAGE), 1)
        limit = min(max(_int("limit", DEFAULT_PAGE_LIMIT), 1), MAX_PAGE_LIMIT)
        return cls(page=page, limit=limit)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    request: PageRequest

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.request.limit) if self.total else 0

    def envelope(self) -> dict:
        return {
            "count": len(self.items),
            "total": self.total,
            "pagination": {"page": self.request.page, "limit": self.request.limit, "pages": self.pages},
            "data": list(self.items),
        }
