"""Pure functions for paginated list state.

This module contains the functional core behind the list controller:
- No I/O operations (no network, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

The backend is the source of truth for ordering and counts; these helpers
only keep the local copy of a page consistent with it.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from exptrack.domain.expenses import ExpenseRecord
from exptrack.domain.models import DEFAULT_PAGE_SIZE, SORT_DIRECTION, SORT_FIELD, Category, ExpenseId


class LoadState(Enum):
    """Lifecycle of the list view."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True)
class PageQuery:
    """Immutable description of the page the user wants to see."""

    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    sort_field: str = SORT_FIELD
    sort_direction: str = SORT_DIRECTION
    category: Category | None = None
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class PageResult:
    """Immutable page of expenses with the backend's totals."""

    content: tuple[ExpenseRecord, ...] = ()
    total_pages: int = 0
    total_elements: int = 0

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "PageResult":
        """Build a page from the backend's paged response.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a record or total cannot be parsed.
        """
        content = tuple(ExpenseRecord.from_json(item) for item in payload["content"])
        total_pages = int(payload["totalPages"])
        total_elements = int(payload["totalElements"])
        if total_pages < 0 or total_elements < 0:
            raise ValueError("Page totals cannot be negative")
        return cls(content=content, total_pages=total_pages, total_elements=total_elements)


@dataclass(frozen=True)
class ListViewState:
    """Snapshot of everything the list view displays."""

    query: PageQuery = field(default_factory=PageQuery)
    result: PageResult = field(default_factory=PageResult)
    state: LoadState = LoadState.IDLE
    error: str | None = None

    @property
    def loading(self) -> bool:
        return self.state is LoadState.LOADING


def compute_total_pages(total_elements: int, page_size: int) -> int:
    """Number of pages needed for total_elements records.

    Args:
        total_elements: Total number of records (negative counts as zero).
        page_size: Records per page, must be positive.

    Returns:
        ceil(total_elements / page_size), and 0 when there are no records.

    Raises:
        ValueError: If page_size is not positive.
    """
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    return math.ceil(max(total_elements, 0) / page_size)


def clamp_page_index(page_index: int, total_pages: int) -> int:
    """Clamp a requested page index into [0, total_pages - 1].

    An unknown or empty total (0) only allows the first page.
    """
    last_index = max(total_pages - 1, 0)
    return min(max(page_index, 0), last_index)


def order_date_range(
    start_date: date | None,
    end_date: date | None,
    end_changed: bool = False,
) -> tuple[date | None, date | None]:
    """Keep a date filter from inverting.

    When both bounds are set and start_date > end_date, the bound that was
    not just changed is pushed to meet the other one.

    Args:
        start_date: Start of the range (inclusive).
        end_date: End of the range (inclusive).
        end_changed: True if the end bound is the one the user just set.

    Returns:
        Tuple of (start_date, end_date) with start_date <= end_date.
    """
    if start_date is None or end_date is None or start_date <= end_date:
        return start_date, end_date
    if end_changed:
        return end_date, end_date
    return start_date, start_date


def page_request_params(query: PageQuery) -> dict[str, Any]:
    """Arguments for ExpenseService.get_paginated, omitting unset filters."""
    params: dict[str, Any] = {
        "page_index": query.page_index,
        "page_size": query.page_size,
        "sort_field": query.sort_field,
        "sort_direction": query.sort_direction,
    }
    if query.category is not None:
        params["category"] = query.category
    if query.start_date is not None:
        params["start_date"] = query.start_date
    if query.end_date is not None:
        params["end_date"] = query.end_date
    return params


def splice_record(result: PageResult, expense_id: ExpenseId, page_size: int) -> PageResult | None:
    """Remove a deleted record from a page and recompute the totals.

    Args:
        result: Page currently displayed.
        expense_id: Id of the record the backend confirmed as deleted.
        page_size: Page size the page was fetched with.

    Returns:
        The updated page, or None if the record is not on this page.
    """
    if not any(record.id == expense_id for record in result.content):
        return None

    content = tuple(record for record in result.content if record.id != expense_id)
    total_elements = max(result.total_elements - 1, len(content))
    return PageResult(
        content=content,
        total_pages=compute_total_pages(total_elements, page_size),
        total_elements=total_elements,
    )


def page_to_step_back_to(query: PageQuery, result: PageResult) -> int | None:
    """Page index to reload when the displayed page ran past the end.

    Returns:
        The last valid page index if the current page is empty and lies
        beyond the known totals, otherwise None.
    """
    if result.content or query.page_index == 0:
        return None
    if query.page_index < result.total_pages:
        return None
    return max(result.total_pages - 1, 0)
