"""Error types raised by exptrack services and forms."""


class ExpenseTrackerError(Exception):
    """Base class for all exptrack errors."""


class ServiceError(ExpenseTrackerError):
    """A call to the backend did not succeed."""


class NetworkError(ServiceError):
    """The backend could not be reached (connection refused, timeout, ...)."""


class ServerError(ServiceError):
    """The backend answered with a non-2xx status or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ServerError):
    """The backend rejected the session token (HTTP 401)."""

    def __init__(self, message: str = "Session expired, please log in again") -> None:
        super().__init__(message, status_code=401)


class ValidationError(ExpenseTrackerError):
    """Expense form input failed client-side validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
