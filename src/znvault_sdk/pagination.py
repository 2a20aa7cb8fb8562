"""
Pagination models and helpers for ZN-Vault SDK.

The API envelope changed across server versions. Newer servers send
``{"items": [...], "pagination": {"total", "limit", "offset", "hasMore"}}``,
older ones send ``{"data": [...], "total": ..., "limit": ..., "hasMore": ...}``
with the pagination fields flattened into the top level. ``Page`` accepts
both.
"""

from typing import Any, AsyncIterator, Awaitable, Callable, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 50

# Primary key first, then the names older endpoints used.
_LIMIT_KEYS = ("limit", "pageSize", "page_size")


def _first_present(data: dict, keys, default: Any) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


class Pagination(BaseModel):
    """Pagination metadata of a single page."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total: int = Field(..., description="Total items matching the query")
    limit: int = Field(..., description="Page size used by the server")
    offset: int = Field(..., description="Offset of the first item")
    has_more: bool = Field(..., alias="hasMore", description="Whether more items exist")


class Page(BaseModel, Generic[T]):
    """One page of a listable resource."""
    model_config = ConfigDict(frozen=True)

    items: List[T] = Field(default_factory=list)
    pagination: Pagination

    @model_validator(mode="before")
    @classmethod
    def _normalize_envelope(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        items: Any = []
        for key in ("items", "data"):
            if isinstance(data.get(key), list):
                items = data[key]
                break

        pagination = data.get("pagination")
        if pagination is None:
            # A missing total falls back to the item count, which under-reports
            # on every page but the last.
            pagination = {
                "total": _first_present(data, ("total",), len(items)),
                "limit": _first_present(data, _LIMIT_KEYS, DEFAULT_PAGE_LIMIT),
                "offset": _first_present(data, ("offset",), 0),
                "hasMore": _first_present(data, ("hasMore",), False),
            }

        return {"items": items, "pagination": pagination}

    @property
    def total(self) -> int:
        return self.pagination.total

    @property
    def limit(self) -> int:
        return self.pagination.limit

    @property
    def offset(self) -> int:
        return self.pagination.offset

    @property
    def has_more(self) -> bool:
        return self.pagination.has_more


async def iterate_pages(
    fetch_page: Callable[[int], Awaitable[Page[T]]],
    offset: int = 0,
) -> AsyncIterator[T]:
    """
    Yield every item across pages.

    Args:
        fetch_page: Coroutine function returning the page at a given offset.
        offset: Offset of the first page to fetch.
    """
    while True:
        page = await fetch_page(offset)
        for item in page.items:
            yield item
        if not page.has_more or not page.items:
            return
        offset += len(page.items)
