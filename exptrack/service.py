"""Expense backend REST API interactions."""

import logging
from datetime import date
from typing import Any

import requests

from exptrack.dates import format_iso_date
from exptrack.domain.expenses import ExpenseRecord
from exptrack.domain.models import SORT_DIRECTION, SORT_FIELD, Category, ExpenseId
from exptrack.domain.pagination import PageResult
from exptrack.errors import AuthenticationError, NetworkError, ServerError
from exptrack.session import Session

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 10.0

# List sort fields mapped to the backend's entity properties
SORT_FIELD_PARAMS = {
    "date": "expenseDate",
}


def send_request(
    http: requests.Session,
    session: Session,
    method: str,
    url: str,
    timeout: float,
    resource: str = "Expense",
    **kwargs: Any,
) -> requests.Response:
    """Send an authenticated request and map failures onto the error taxonomy.

    Args:
        http: requests session used as transport.
        session: Session whose token is attached.
        method: HTTP method.
        url: Absolute URL.
        timeout: Request timeout in seconds.
        resource: What the URL names, used in the 404 message.
        **kwargs: Passed through to requests (params, json, ...).

    Returns:
        The successful response.

    Raises:
        NetworkError: If the backend cannot be reached.
        AuthenticationError: If the backend answers 401. An authenticated
            session is expired first.
        ServerError: For any other non-2xx answer.
    """
    headers = {"Accept": "application/json"}
    headers.update(session.auth_headers())

    try:
        response = http.request(method, url, headers=headers, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        logger.warning("%s %s failed: %s", method, url, e)
        raise NetworkError(f"Could not reach the expense server: {e}") from e

    if response.status_code == 401:
        logger.warning("%s %s answered 401", method, url)
        if session.is_authenticated:
            session.expire()
        raise AuthenticationError()

    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        logger.warning("%s %s returned %s", method, url, response.status_code)
        raise ServerError(_describe_failure(response, resource), status_code=response.status_code) from e

    logger.debug("%s %s returned %s", method, url, response.status_code)
    return response


def _describe_failure(response: requests.Response, resource: str) -> str:
    if response.status_code == 404:
        return f"{resource} not found"
    if response.status_code >= 500:
        return f"The expense server failed ({response.status_code})"
    detail = response.text.strip()
    if detail and len(detail) <= 200:
        return f"Request rejected ({response.status_code}): {detail}"
    return f"Request rejected ({response.status_code})"


def _read_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ServerError("The expense server sent an unreadable response", response.status_code) from e


class ExpenseService:
    """Client for the /expenses resource."""

    def __init__(
        self,
        base_url: str,
        session: Session,
        *,
        http: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.http = http or requests.Session()
        self.timeout = timeout

    def _url(self, path: str = "") -> str:
        return f"{self.base_url}/expenses{path}"

    def _send(self, method: str, path: str = "", **kwargs: Any) -> requests.Response:
        return send_request(self.http, self.session, method, self._url(path), self.timeout, **kwargs)

    def get_paginated(
        self,
        page_index: int,
        page_size: int,
        sort_field: str = SORT_FIELD,
        sort_direction: str = SORT_DIRECTION,
        category: Category | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PageResult:
        """Fetch one page of expenses.

        Args:
            page_index: Zero-based page index.
            page_size: Records per page.
            sort_field: Field to sort by ("date").
            sort_direction: "asc" or "desc".
            category: Only expenses in this category, if given.
            start_date: Only expenses on or after this date, if given.
            end_date: Only expenses on or before this date, if given.

        Returns:
            The page with the backend's totals.

        Raises:
            ServiceError: If the request fails or the response is malformed.
        """
        params: dict[str, Any] = {
            "page": page_index,
            "size": page_size,
            "sortBy": SORT_FIELD_PARAMS.get(sort_field, sort_field),
            "sortDir": sort_direction,
        }
        # Unset filters are left out so the backend applies no constraint
        if category is not None:
            params["category"] = Category(category).value
        if start_date is not None:
            params["startDate"] = format_iso_date(start_date)
        if end_date is not None:
            params["endDate"] = format_iso_date(end_date)

        response = self._send("GET", params=params)
        payload = _read_json(response)
        try:
            return PageResult.from_json(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise ServerError(f"Malformed page from the expense server: {e}", response.status_code) from e

    def get_by_id(self, expense_id: ExpenseId) -> ExpenseRecord:
        """Fetch a single expense.

        Raises:
            ServiceError: If the request fails (404 if it does not exist).
        """
        response = self._send("GET", f"/{expense_id}")
        return self._record_from(response)

    def create(self, record: ExpenseRecord) -> ExpenseRecord:
        """Create an expense and return it with its server-assigned id."""
        response = self._send("POST", json=record.to_json())
        return self._record_from(response)

    def update(self, expense_id: ExpenseId, record: ExpenseRecord) -> ExpenseRecord:
        """Replace the fields of an existing expense."""
        response = self._send("PUT", f"/{expense_id}", json=record.to_json())
        return self._record_from(response)

    def delete_by_id(self, expense_id: ExpenseId) -> None:
        """Delete an expense. The backend answers 204 with no payload."""
        self._send("DELETE", f"/{expense_id}")
        logger.info("Deleted expense %s", expense_id)

    def _record_from(self, response: requests.Response) -> ExpenseRecord:
        payload = _read_json(response)
        try:
            return ExpenseRecord.from_json(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise ServerError(f"Malformed expense from the expense server: {e}", response.status_code) from e
