"""Limit/offset pagination over SQLAlchemy queries.

The page descriptor mirrors what the frontend consumes: the slice of items,
counters in ``meta`` and absolute navigation URLs in ``links``.
"""

import math
from typing import Any, Callable, Generic, TypeVar

from fastapi.datastructures import URL
from pydantic import BaseModel
from sqlalchemy.orm import Query

T = TypeVar("T")


class PageMeta(BaseModel):
    total_items: int
    item_count: int
    items_per_page: int
    total_pages: int
    current_page: int


class PageLinks(BaseModel):
    first: str
    previous: str | None
    next: str | None
    last: str


class Page(BaseModel, Generic[T]):
    items: list[T]
    meta: PageMeta
    links: PageLinks

    def map(self, fn: Callable[[Any], Any]) -> "Page":
        """Return the same page with every item passed through ``fn``."""
        return self.model_copy(update={"items": [fn(item) for item in self.items]})


def _page_url(route: str, page: int, limit: int) -> str:
    return str(URL(route).include_query_params(page=page, limit=limit))


def paginate(query: Query, page: int, limit: int, route: str) -> Page:
    """Count ``query``, then fetch the ``page``-th slice of ``limit`` rows.

    ``query`` must already carry its filters and ordering. Pages past the end
    come back empty with the real totals.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be >= 1")

    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    total_pages = math.ceil(total / limit)

    return Page(
        items=items,
        meta=PageMeta(
            total_items=total,
            item_count=len(items),
            items_per_page=limit,
            total_pages=total_pages,
            current_page=page,
        ),
        links=PageLinks(
            first=_page_url(route, 1, limit),
            previous=_page_url(route, page - 1, limit) if page > 1 else None,
            next=_page_url(route, page + 1, limit) if page < total_pages else None,
            last=_page_url(route, max(total_pages, 1), limit),
        ),
    )
