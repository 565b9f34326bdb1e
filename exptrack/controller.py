"""List state for the paginated expense view.

ListController owns the page/filter intent of one list view, issues fetches
through an ExpenseService, and reconciles the displayed page after deletes.
The backend stays the source of truth for ordering and counts.

Fetches and deletes run on an executor so new intents can arrive while a
request is in flight. Every load is tagged with a ticket; with
``discard_stale`` on, a completion whose ticket is no longer the latest is
dropped, so an older response never overwrites a newer one.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from enum import StrEnum
from functools import partial
from typing import Any, Protocol

from exptrack.domain.expenses import ExpenseRecord
from exptrack.domain.models import DEFAULT_PAGE_SIZE, PAGE_SIZES, Category, ExpenseId
from exptrack.domain.pagination import (
    ListViewState,
    LoadState,
    PageQuery,
    PageResult,
    clamp_page_index,
    order_date_range,
    page_request_params,
    page_to_step_back_to,
    splice_record,
)
from exptrack.errors import ServiceError

logger = logging.getLogger(__name__)

Listener = Callable[[ListViewState], None]

_UNSET: Any = object()


class DeleteStrategy(StrEnum):
    """How the displayed page is reconciled after a confirmed delete."""

    REFETCH = "refetch"
    LOCAL_SPLICE = "local-splice"


class ExpenseSource(Protocol):
    """The part of ExpenseService the list needs."""

    def get_paginated(
        self,
        page_index: int,
        page_size: int,
        sort_field: str = ...,
        sort_direction: str = ...,
        category: Category | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PageResult: ...

    def delete_by_id(self, expense_id: ExpenseId) -> None: ...


class ListController:
    """Pagination, filtering and delete reconciliation for one list view."""

    def __init__(
        self,
        service: ExpenseSource,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        strategy: DeleteStrategy | str = DeleteStrategy.REFETCH,
        discard_stale: bool = True,
        executor: Executor | None = None,
        on_add: Callable[[], None] | None = None,
        on_edit: Callable[[ExpenseRecord], None] | None = None,
    ) -> None:
        _check_page_size(page_size)
        self._service = service
        self._strategy = DeleteStrategy(strategy)
        self._discard_stale = discard_stale
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="exptrack-list")
        self._on_add = on_add
        self._on_edit = on_edit

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._view = ListViewState(query=PageQuery(page_size=page_size))
        self._ticket = 0
        self._pending: set[Future[Any]] = set()
        self._listeners: list[Listener] = []
        self._closed = False

    # Read-only view state

    @property
    def strategy(self) -> DeleteStrategy:
        return self._strategy

    @property
    def query(self) -> PageQuery:
        return self._view.query

    @property
    def content(self) -> tuple[ExpenseRecord, ...]:
        return self._view.result.content

    @property
    def loading(self) -> bool:
        return self._view.loading

    @property
    def error(self) -> str | None:
        return self._view.error

    @property
    def state(self) -> LoadState:
        return self._view.state

    @property
    def page_index(self) -> int:
        return self._view.query.page_index

    @property
    def page_size(self) -> int:
        return self._view.query.page_size

    @property
    def total_pages(self) -> int:
        return self._view.result.total_pages

    @property
    def total_elements(self) -> int:
        return self._view.result.total_elements

    @property
    def category(self) -> Category | None:
        return self._view.query.category

    @property
    def start_date(self) -> date | None:
        return self._view.query.start_date

    @property
    def end_date(self) -> date | None:
        return self._view.query.end_date

    def snapshot(self) -> ListViewState:
        """Current view state as one immutable value."""
        return self._view

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with a fresh snapshot after every state change.

        Returns:
            A callable that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # Lifecycle

    def mount(self) -> Future[Any]:
        """Fire the first fetch (page 0, no filters)."""
        return self.load_page()

    def close(self) -> None:
        """Tear the view down. Completions arriving afterwards are ignored."""
        with self._lock:
            self._closed = True
            self._listeners.clear()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "ListController":
        self.mount()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no fetch or delete is outstanding.

        Returns:
            False if the timeout expired first.
        """
        with self._idle:
            return self._idle.wait_for(lambda: not self._pending, timeout)

    # Operations

    def load_page(self) -> Future[Any]:
        """Fetch the page described by the current query."""
        with self._lock:
            self._check_open()
            self._ticket += 1
            ticket = self._ticket
            query = self._view.query
            self._view = replace(self._view, state=LoadState.LOADING, error=None)
        self._notify()

        logger.debug("Loading page %s (ticket %s): %s", query.page_index, ticket, query)
        fetch = partial(self._service.get_paginated, **page_request_params(query))
        return self._submit(fetch, partial(self._page_loaded, ticket, query))

    def set_page(self, new_index: int) -> Future[Any] | None:
        """Go to a page, clamped into the known page range.

        Returns:
            The fetch, or None if the request was out of range and clamps to
            the page already on display.
        """
        with self._lock:
            self._check_open()
            view = self._view
            target = clamp_page_index(new_index, view.result.total_pages)
            # Unknown totals (first load) always fetch
            if target != new_index and target == view.query.page_index and view.result.total_pages > 0:
                logger.debug("Page %s is out of range, staying on page %s", new_index, target)
                return None
            self._view = replace(view, query=replace(view.query, page_index=target))
        return self.load_page()

    def set_page_size(self, new_size: int) -> Future[Any]:
        """Change the page size and go back to the first page."""
        _check_page_size(new_size)
        with self._lock:
            self._check_open()
            query = replace(self._view.query, page_size=new_size, page_index=0)
            self._view = replace(self._view, query=query)
        return self.load_page()

    def set_filter(
        self,
        category: Category | str | None = _UNSET,
        start_date: date | None = _UNSET,
        end_date: date | None = _UNSET,
    ) -> Future[Any]:
        """Change some of the filters and go back to the first page.

        Omitted arguments keep their current value; None clears a filter.
        The date range is never allowed to invert: the bound that was not
        just set is pushed to meet the one that was.
        """
        with self._lock:
            self._check_open()
            query = self._view.query

            new_category = query.category
            if category is not _UNSET:
                new_category = Category(category) if category is not None else None

            new_start = query.start_date if start_date is _UNSET else start_date
            new_end = query.end_date if end_date is _UNSET else end_date
            end_changed = end_date is not _UNSET and start_date is _UNSET
            new_start, new_end = order_date_range(new_start, new_end, end_changed=end_changed)

            query = replace(
                query,
                category=new_category,
                start_date=new_start,
                end_date=new_end,
                page_index=0,
            )
            self._view = replace(self._view, query=query)
        return self.load_page()

    def delete_record(self, expense_id: ExpenseId) -> Future[Any]:
        """Delete an expense and reconcile the page once the backend confirms."""
        with self._lock:
            self._check_open()
        logger.debug("Deleting expense %s (%s)", expense_id, self._strategy)
        delete = partial(self._service.delete_by_id, expense_id)
        return self._submit(delete, partial(self._record_deleted, expense_id))

    # Intents for the UI layer

    request_page = set_page
    request_page_size = set_page_size
    request_filter_change = set_filter
    request_delete = delete_record

    def request_add(self) -> None:
        """Hand over to the add-expense flow."""
        if self._on_add is not None:
            self._on_add()

    def request_edit(self, record: ExpenseRecord) -> None:
        """Hand over to the edit-expense flow."""
        if self._on_edit is not None:
            self._on_edit(record)

    # Completions

    def _page_loaded(self, ticket: int, query: PageQuery, future: Future[PageResult]) -> None:
        if future.cancelled():
            return
        error = future.exception()
        step_back = None
        with self._lock:
            if self._closed:
                return
            if self._discard_stale and ticket != self._ticket:
                logger.debug("Discarding stale page %s (ticket %s, latest %s)", query.page_index, ticket, self._ticket)
                return

            if error is not None:
                self._view = replace(self._view, state=LoadState.ERRORED, error=_describe(error, "loading expenses"))
            else:
                result = future.result()
                self._view = replace(self._view, result=result, state=LoadState.LOADED, error=None)
                if query == self._view.query:
                    step_back = page_to_step_back_to(query, result)
                if step_back is not None:
                    self._view = replace(self._view, query=replace(query, page_index=step_back))
        self._notify()

        if step_back is not None:
            logger.info("Page %s is past the last page, loading page %s", query.page_index, step_back)
            self.load_page()

    def _record_deleted(self, expense_id: ExpenseId, future: Future[None]) -> None:
        if future.cancelled():
            return
        error = future.exception()
        reload = False
        with self._lock:
            if self._closed:
                return
            view = self._view

            if error is not None:
                # The record stays on display; a running load keeps its state
                state = view.state if view.state is LoadState.LOADING else LoadState.ERRORED
                self._view = replace(view, state=state, error=_describe(error, "deleting the expense"))
            elif self._strategy is DeleteStrategy.REFETCH:
                reload = True
            else:
                spliced = splice_record(view.result, expense_id, view.query.page_size)
                if spliced is None:
                    logger.info("Deleted expense %s is not on the displayed page, refetching", expense_id)
                    reload = True
                else:
                    query = view.query
                    step_back = page_to_step_back_to(query, spliced)
                    if step_back is not None:
                        query = replace(query, page_index=step_back)
                        reload = True
                    elif view.state is LoadState.LOADING:
                        # A fetch in flight may have been served before the delete
                        reload = True
                    self._view = replace(view, query=query, result=spliced)
        self._notify()

        if reload:
            self.load_page()

    # Plumbing

    def _submit(self, fn: Callable[[], Any], on_done: Callable[[Future[Any]], None]) -> Future[Any]:
        future = self._executor.submit(fn)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(partial(self._settle, on_done))
        return future

    def _settle(self, on_done: Callable[[Future[Any]], None], future: Future[Any]) -> None:
        try:
            on_done(future)
        finally:
            with self._idle:
                self._pending.discard(future)
                self._idle.notify_all()

    def _notify(self) -> None:
        with self._lock:
            snapshot = self._view
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("ListController is closed")


def _check_page_size(page_size: int) -> None:
    if page_size not in PAGE_SIZES:
        sizes = ", ".join(str(size) for size in PAGE_SIZES)
        raise ValueError(f"Page size must be one of {sizes}, got {page_size}")


def _describe(error: BaseException, action: str) -> str:
    if isinstance(error, ServiceError):
        return str(error)
    logger.error("Unexpected error while %s", action, exc_info=error)
    return f"Unexpected error while {action}"
