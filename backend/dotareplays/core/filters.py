"""Listing Filters & Pagination Metadata — page window, allow-listed sort, derived summary.

Invariants:
    - sort_column() only ever returns a member of sort_safelist (minus any "-" prefix)
    - offset() == (page - 1) * page_size
    - Metadata is derived from the total reported by the same listing query
    - total_records == 0 → every Metadata field is 0

Design Decisions:
    - Allow-list is server data (REPLAY_SORT_SAFELIST), never client-extensible:
      the ORDER BY clause is built only from its members
"""

import math
from dataclasses import dataclass

from dotareplays.core.errors import UnsafeSortParameter

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100

REPLAY_SORT_SAFELIST: tuple[str, ...] = (
    "id", "title", "year", "runtime",
    "-id", "-title", "-year", "-runtime",
)


@dataclass(frozen=True)
class Filters:
    page: int = 1
    page_size: int = 20
    sort: str = "id"
    sort_safelist: tuple[str, ...] = REPLAY_SORT_SAFELIST

    def sort_column(self) -> str:
        """Column name for the sort key; refuses anything off the allow-list."""
        if self.sort in self.sort_safelist:
            return self.sort.removeprefix("-")
        raise UnsafeSortParameter(f"unsafe sort parameter: {self.sort!r}")

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class Metadata:
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )
