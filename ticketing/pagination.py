"""Lazy, restartable pagination over list endpoints.

A ``PaginatedSequence`` describes a listing (page size, filters, sort) and
never caches results. Every traversal gets its own ``Cursor``, so iterating
the same sequence twice issues the same requests twice.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Generator, Generic, Iterable, Mapping, TypeVar

from .exceptions import PageAccessError, UnsupportedCriteriaError, UnsupportedSortError

if TYPE_CHECKING:
    from .collection import Collection
    from .models import ResourceModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound="ResourceModel")

LAST_PAGE = "last"
SORT_DIRECTIONS = ("asc", "desc")


def _is_sort_pair(item: Any) -> bool:
    return (
        isinstance(item, tuple)
        and len(item) == 2
        and isinstance(item[1], str)
        and item[1].lower() in SORT_DIRECTIONS
    )


def _normalise_sort(criteria: Any) -> list[tuple[str, str]]:
    if isinstance(criteria, str):
        criteria = [part.strip() for part in criteria.split(",") if part.strip()]
    if isinstance(criteria, Mapping):
        return [(str(name), str(direction).lower()) for name, direction in criteria.items()]
    if _is_sort_pair(criteria):
        criteria = [criteria]
    if not isinstance(criteria, Iterable) or not criteria:
        raise UnsupportedSortError(f"No sort fields given: {criteria!r}.")

    ordering: list[tuple[str, str]] = []
    for item in criteria:
        if isinstance(item, tuple):
            if len(item) != 2:
                raise UnsupportedSortError(
                    f"Sort pairs must be (field, direction), got {item!r}."
                )
            name, direction = item
            ordering.append((str(name), str(direction).lower()))
        elif str(item).startswith("-"):
            ordering.append((str(item)[1:], "desc"))
        else:
            ordering.append((str(item), "asc"))
    return ordering


def _format_filter_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return value


class Cursor(Generic[ModelT]):
    """Position within one traversal of a ``PaginatedSequence``."""

    def __init__(self, sequence: PaginatedSequence[ModelT]):
        self.sequence = sequence
        self.page_number: int | None = None
        self.last_page: int | None = None
        self.total: int | None = None
        self._last_count = 0
        self._at_last = False

    def __repr__(self) -> str:
        return f"<Cursor page={self.page_number} of {self.last_page}>"

    @property
    def page_size(self) -> int | None:
        return self.sequence.page_size

    @property
    def has_next(self) -> bool:
        if self._at_last:
            return False
        if self.page_number is None:
            return True
        if self.last_page is not None:
            return self.page_number < self.last_page
        # No paging metadata: a full page suggests more may follow.
        return self.page_size is not None and self._last_count >= self.page_size

    @property
    def has_previous(self) -> bool:
        return self.page_number is not None and self.page_number > 1

    def reset(self) -> None:
        self.page_number = None
        self.last_page = None
        self.total = None
        self._last_count = 0
        self._at_last = False

    def _update(self, requested: int | str, items: list[ModelT], meta: Mapping[str, Any]) -> None:
        self.last_page = meta.get("last_page", self.last_page)
        self.total = meta.get("total", self.total)
        current = meta.get("current_page")
        if current is None:
            current = self.last_page if requested == LAST_PAGE else requested
        self.page_number = current
        self._last_count = len(items)
        self._at_last = requested == LAST_PAGE or (
            self.last_page is not None and self.page_number >= self.last_page
        )

    async def fetch(self, number: int) -> list[ModelT]:
        if number < 1:
            raise PageAccessError(f"Page {number} does not exist; pages start at 1.")
        if self.last_page is not None and number > max(self.last_page, 1):
            raise PageAccessError(
                f"Page {number} does not exist; the last page is {self.last_page}."
            )
        items, meta = await self.sequence._request_page(number)
        self._update(number, items, meta)
        return items

    async def next(self) -> list[ModelT]:
        if not self.has_next:
            raise PageAccessError("There are no further pages.")
        return await self.fetch((self.page_number or 0) + 1)

    async def previous(self) -> list[ModelT]:
        if not self.has_previous:
            raise PageAccessError("There is no previous page.")
        return await self.fetch(self.page_number - 1)

    async def current(self) -> list[ModelT]:
        if self.page_number is None:
            return await self.next()
        return await self.fetch(self.page_number)

    async def last(self) -> list[ModelT]:
        """Fetch the terminal page in a single request."""
        items, meta = await self.sequence._request_page(LAST_PAGE)
        self._update(LAST_PAGE, items, meta)
        return items


class PaginatedSequence(Generic[ModelT]):
    """An immutable listing query over a collection.

    ``await`` yields the first page, ``async for`` walks every model across
    all pages, and ``filter()``/``sort()`` return narrowed copies.
    """

    def __init__(
        self,
        collection: Collection[ModelT],
        page_size: int | None = None,
        filters: Mapping[str, Any] | None = None,
        ordering: Iterable[tuple[str, str]] | None = None,
    ):
        if page_size is not None and page_size < 1:
            raise PageAccessError(f"Page size must be at least 1, got {page_size}.")
        self.collection = collection
        self.page_size = page_size
        self.filters: dict[str, Any] = dict(filters or {})
        self.ordering: list[tuple[str, str]] = list(ordering or [])

    def __repr__(self) -> str:
        return (
            f"<PaginatedSequence {self.collection.endpoint!r} page_size={self.page_size} "
            f"filters={self.filters} ordering={self.ordering}>"
        )

    def __await__(self) -> Generator[Any, None, list[ModelT]]:
        return self.first().__await__()

    async def __aiter__(self) -> AsyncIterator[ModelT]:
        async for page in self.pages():
            for model in page:
                yield model

    def _copy(self, **changes: Any) -> PaginatedSequence[ModelT]:
        state = {
            "page_size": self.page_size,
            "filters": self.filters,
            "ordering": self.ordering,
        }
        state.update(changes)
        return type(self)(self.collection, **state)

    def filter(self, criteria: Mapping[str, Any] | None = None, **kwargs: Any) -> PaginatedSequence[ModelT]:
        criteria = {**(criteria or {}), **kwargs}
        allowed = self.collection.model_cls.filterable
        unsupported = [name for name in criteria if name not in allowed]
        if unsupported:
            raise UnsupportedCriteriaError(
                f"The following criteria are not supported for "
                f"{self.collection.resource_name} listings: {', '.join(unsupported)}.",
                fields=unsupported,
            )
        return self._copy(filters={**self.filters, **criteria})

    def sort(self, criteria: Any) -> PaginatedSequence[ModelT]:
        """Order results by field names.

        Accepts ``"name"``, ``"-name"``, ``("name", "desc")``,
        ``["venue", "-start_time"]`` or ``{"start_time": "desc"}``.
        """
        ordering = _normalise_sort(criteria)
        allowed = self.collection.model_cls.sortable
        unsupported = [name for name, _ in ordering if name not in allowed]
        if unsupported:
            raise UnsupportedSortError(
                f"The following fields cannot be used to sort "
                f"{self.collection.resource_name} listings: {', '.join(unsupported)}.",
                fields=unsupported,
            )
        bad_directions = [name for name, direction in ordering if direction not in SORT_DIRECTIONS]
        if bad_directions:
            raise UnsupportedSortError(
                f"Sort direction must be 'asc' or 'desc' for: {', '.join(bad_directions)}.",
                fields=bad_directions,
            )
        return self._copy(ordering=ordering)

    def params(self, page: int | str) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page}
        if self.page_size is not None:
            params["per_page"] = self.page_size
        for name, value in self.filters.items():
            params[name] = _format_filter_value(value)
        if self.ordering:
            params["sort"] = ",".join(
                name if direction == "asc" else f"-{name}" for name, direction in self.ordering
            )
        return params

    async def _request_page(self, page: int | str) -> tuple[list[ModelT], dict[str, Any]]:
        payload = await self.collection._fetch_page(self.params(page))
        if isinstance(payload, list):
            records, meta = payload, {}
        elif isinstance(payload, dict):
            records = payload.get("data") or []
            meta = payload.get("meta") or {}
        else:
            records, meta = [], {}
        logger.debug(
            f"Fetched page {page} of {self.collection.endpoint}: {len(records)} records"
        )
        return [self.collection._instantiate(record) for record in records], meta

    def cursor(self) -> Cursor[ModelT]:
        return Cursor(self)

    async def first(self) -> list[ModelT]:
        return await self.cursor().next()

    async def page(self, number: int) -> list[ModelT]:
        return await self.cursor().fetch(number)

    async def last(self) -> list[ModelT]:
        return await self.cursor().last()

    async def pages(self) -> AsyncIterator[list[ModelT]]:
        cursor = self.cursor()
        while cursor.has_next:
            page = await cursor.next()
            if not page:
                return
            yield page

    async def all(self) -> list[ModelT]:
        return [model async for model in self]
