"""Fakes shared by the exptrack tests.

- FakeExpenseService: in-memory backend with the paging/filter semantics of
  the real server, recording every call it receives.
- ImmediateExecutor / DeferredExecutor: deterministic stand-ins for the
  controller's thread pool. DeferredExecutor holds jobs until a test runs
  them, in any order, or never (a hung request).
- FakeHttp: requests.Session stand-in returning canned responses.
"""

import json
import math
from collections.abc import Callable
from concurrent.futures import Executor, Future
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import requests

from exptrack.domain.expenses import ExpenseRecord
from exptrack.domain.models import Category, ExpenseId
from exptrack.domain.pagination import PageResult
from exptrack.errors import ServerError

BASE_DATE = date(2024, 1, 1)


def make_expense(
    expense_id: int,
    category: Category = Category.FOOD,
    amount: str = "12.50",
    description: str | None = None,
) -> ExpenseRecord:
    """Build a record whose date grows with its id (higher id = newer)."""
    return ExpenseRecord(
        id=ExpenseId(expense_id),
        description=description or f"Expense {expense_id}",
        amount=Decimal(amount),
        date=BASE_DATE + timedelta(days=expense_id),
        category=category,
    )


class FakeExpenseService:
    """In-memory expense backend sorted newest first."""

    def __init__(self, records: list[ExpenseRecord] | None = None) -> None:
        self.records = list(records or [])
        self.page_calls: list[dict[str, Any]] = []
        self.delete_calls: list[ExpenseId] = []
        self.get_error: BaseException | None = None
        self.delete_error: BaseException | None = None

    def get_paginated(self, **kwargs: Any) -> PageResult:
        self.page_calls.append(dict(kwargs))
        if self.get_error is not None:
            raise self.get_error

        page_index = kwargs["page_index"]
        page_size = kwargs["page_size"]
        category = kwargs.get("category")
        start_date = kwargs.get("start_date")
        end_date = kwargs.get("end_date")

        matching = [
            record
            for record in self.records
            if (category is None or record.category == category)
            and (start_date is None or record.date >= start_date)
            and (end_date is None or record.date <= end_date)
        ]
        matching.sort(key=lambda record: (record.date, record.id), reverse=True)

        offset = page_index * page_size
        return PageResult(
            content=tuple(matching[offset : offset + page_size]),
            total_pages=math.ceil(len(matching) / page_size),
            total_elements=len(matching),
        )

    def delete_by_id(self, expense_id: ExpenseId) -> None:
        self.delete_calls.append(expense_id)
        if self.delete_error is not None:
            raise self.delete_error
        for record in self.records:
            if record.id == expense_id:
                self.records.remove(record)
                return
        raise ServerError("Expense not found", status_code=404)

    def get_by_id(self, expense_id: ExpenseId) -> ExpenseRecord:
        for record in self.records:
            if record.id == expense_id:
                return record
        raise ServerError("Expense not found", status_code=404)

    def create(self, record: ExpenseRecord) -> ExpenseRecord:
        next_id = max((r.id or 0 for r in self.records), default=0) + 1
        saved = replace(record, id=ExpenseId(next_id))
        self.records.append(saved)
        return saved

    def update(self, expense_id: ExpenseId, record: ExpenseRecord) -> ExpenseRecord:
        existing = self.get_by_id(expense_id)
        saved = replace(record, id=expense_id)
        self.records[self.records.index(existing)] = saved
        return saved


class ImmediateExecutor(Executor):
    """Runs every job synchronously inside submit()."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future[Any]:
        future: Future[Any] = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


class DeferredExecutor(Executor):
    """Holds jobs until the test runs them."""

    def __init__(self) -> None:
        self.jobs: list[tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any], Future[Any]]] = []

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future[Any]:
        future: Future[Any] = Future()
        self.jobs.append((fn, args, kwargs, future))
        return future

    @property
    def pending(self) -> int:
        return len(self.jobs)

    def run(self, index: int = 0) -> None:
        fn, args, kwargs, future = self.jobs.pop(index)
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def run_all(self) -> None:
        while self.jobs:
            self.run(0)


def make_response(
    status_code: int,
    body: Any = None,
    text: str = "",
    url: str = "http://test/api/expenses",
) -> requests.Response:
    """Build a real requests.Response with a JSON or text body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "Test"
    response.url = url
    response.encoding = "utf-8"
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = text.encode("utf-8")
    return response


class FakeHttp:
    """requests.Session stand-in: records calls and replays responses."""

    def __init__(self, *responses: requests.Response | BaseException) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def expense_json(expense_id: int, **overrides: Any) -> dict[str, Any]:
    """Backend JSON for one expense."""
    payload: dict[str, Any] = {
        "id": expense_id,
        "description": f"Expense {expense_id}",
        "amount": 12.5,
        "date": (BASE_DATE + timedelta(days=expense_id)).isoformat(),
        "category": "FOOD",
    }
    payload.update(overrides)
    return payload
