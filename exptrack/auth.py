"""Accounts on the expense backend: sign-up, login, logout and profile."""

import logging
from typing import Any

import requests

from exptrack.domain.accounts import Registration
from exptrack.errors import AuthenticationError, ServerError
from exptrack.service import DEFAULT_TIMEOUT, send_request
from exptrack.session import Session

logger = logging.getLogger(__name__)


class AuthService:
    """Account operations. Acquires and releases a Session."""

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

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and acquire the session.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            The user profile returned by the backend.

        Raises:
            AuthenticationError: If the credentials are rejected.
            ServiceError: If the request fails otherwise.
        """
        # A stale token must not be sent along with the credentials
        self.session.clear()
        try:
            response = send_request(
                self.http,
                self.session,
                "POST",
                f"{self.base_url}/users/login",
                self.timeout,
                json={"email": email, "password": password},
            )
        except AuthenticationError:
            raise AuthenticationError("Invalid email or password") from None

        try:
            payload = response.json()
            token = payload["accessToken"]
        except (ValueError, KeyError, TypeError) as e:
            raise ServerError("The expense server sent an unreadable login response", response.status_code) from e

        user = payload.get("user") or {}
        self.session.acquire(token, user)
        logger.info("Logged in as %s", user.get("email", email))
        return user

    def logout(self) -> None:
        """Clear the session. The backend keeps no server-side session to end."""
        self.session.clear()

    def register(self, registration: Registration) -> dict[str, Any]:
        """Create an account. The new user still has to log in.

        Args:
            registration: Validated sign-up form.

        Returns:
            The new user's profile.

        Raises:
            ServerError: If the backend rejects the registration (e.g. the
                email is taken).
            ServiceError: If the request fails otherwise.
        """
        self.session.clear()
        response = send_request(
            self.http,
            self.session,
            "POST",
            f"{self.base_url}/users/register",
            self.timeout,
            json=registration.to_json(),
        )
        profile = _profile_from(response)
        logger.info("Registered %s", registration.email)
        return profile

    def get_profile(self, user_id: int) -> dict[str, Any]:
        """Fetch a user's profile."""
        response = send_request(
            self.http, self.session, "GET", self._profile_url(user_id), self.timeout, resource="User"
        )
        return _profile_from(response)

    def update_profile(self, user_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Change profile fields and return the updated profile.

        The session's cached user is refreshed with the result.
        """
        response = send_request(
            self.http,
            self.session,
            "PUT",
            self._profile_url(user_id),
            self.timeout,
            resource="User",
            json=changes,
        )
        profile = _profile_from(response)
        if self.session.token:
            self.session.acquire(self.session.token, {**self.session.user, **profile})
        return profile

    def _profile_url(self, user_id: int) -> str:
        return f"{self.base_url}/users/{user_id}/profile"


def _profile_from(response: requests.Response) -> dict[str, Any]:
    try:
        profile = response.json()
    except ValueError as e:
        raise ServerError("The expense server sent an unreadable profile", response.status_code) from e
    if not isinstance(profile, dict):
        raise ServerError("The expense server sent an unreadable profile", response.status_code)
    return profile
