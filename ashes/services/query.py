"""
Query pipeline: filter, sort and paginate an in-memory collection.

Pure functions over lists of entities. Nothing here mutates its input.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, TypeVar

T = TypeVar("T")

PAGE_SIZE = 10

Direction = Literal["asc", "desc"]


class RowFilter(Protocol):
    def matches(self, row: Any) -> bool: ...

    def is_empty(self) -> bool: ...


@dataclass(frozen=True)
class RecordFilter:
    """
    Record predicates, applied conjunctively. An empty predicate matches all.

    text:     case-insensitive substring of deceased name, storage number or renter
    location: exact, case-sensitive location name
    date:     substring of the storage start date ("1980" or "1980-03" work)
    """

    text: str = ""
    location: str = ""
    date: str = ""

    def is_empty(self) -> bool:
        return not (self.text or self.location or self.date)

    def matches(self, row: Any) -> bool:
        if self.text:
            needle = self.text.lower()
            haystacks = (row.deceased_name, row.storage_number, row.renter_name)
            if not any(needle in (h or "").lower() for h in haystacks):
                return False
        if self.location and row.location != self.location:
            return False
        if self.date and not (row.storage_start_date and self.date in row.storage_start_date):
            return False
        return True


@dataclass(frozen=True)
class LocationFilter:
    """Case-insensitive substring match on location name."""

    name: str = ""

    def is_empty(self) -> bool:
        return not self.name

    def matches(self, row: Any) -> bool:
        return not self.name or self.name.lower() in row.name.lower()


@dataclass(frozen=True)
class SortSpec:
    key: str
    direction: Direction = "asc"


@dataclass
class QueryPage:
    """One visible page of a filtered, sorted collection."""

    rows: list[Any] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_count: int = 0


def toggle_sort(current: SortSpec | None, key: str) -> SortSpec:
    """Same key flips the direction; a new key starts ascending."""
    if current is not None and current.key == key and current.direction == "asc":
        return SortSpec(key, "desc")
    return SortSpec(key, "asc")


def sort_value(row: Any, key: str) -> str:
    """String form of a field for comparison. Absent values compare as ''."""
    value = getattr(row, key, None)
    return "" if value is None else str(value)


def filter_rows(rows: Sequence[T], row_filter: RowFilter | None) -> list[T]:
    if row_filter is None or row_filter.is_empty():
        return list(rows)
    return [row for row in rows if row_filter.matches(row)]


def sort_rows(rows: Sequence[T], sort: SortSpec | None) -> list[T]:
    """
    Stable single-key sort. Ties keep their prior relative order in both
    directions, so reverse=True is used rather than reversing the result.
    """
    if sort is None:
        return list(rows)
    return sorted(rows, key=lambda row: sort_value(row, sort.key), reverse=sort.direction == "desc")


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    """Number of pages for count rows. Never less than 1, for display."""
    return max(1, math.ceil(count / page_size))


def paginate(rows: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> list[T]:
    """Rows on a 1-based page."""
    start = (page - 1) * page_size
    return list(rows[start : start + page_size])


def clamp_page(page: int, count: int, page_size: int = PAGE_SIZE) -> int:
    return min(max(1, page), total_pages(count, page_size))


def run_query(
    rows: Sequence[T],
    row_filter: RowFilter | None = None,
    sort: SortSpec | None = None,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> QueryPage:
    """
    Derive the visible page from a collection.

    Args:
        rows: Full in-memory collection, in store order
        row_filter: Active predicates (None for no filtering)
        sort: Active sort (None keeps store order)
        page: 1-based page number, clamped into range
        page_size: Rows per page

    Returns:
        QueryPage with the visible rows and page counts
    """
    selected = sort_rows(filter_rows(rows, row_filter), sort)
    page = clamp_page(page, len(selected), page_size)
    return QueryPage(
        rows=paginate(selected, page, page_size),
        page=page,
        total_pages=total_pages(len(selected), page_size),
        total_count=len(selected),
    )
