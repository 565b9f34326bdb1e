"""Authenticated session passed explicitly to the services.

A Session is acquired at login, attached to every request, and cleared at
logout or when the backend rejects its token. Hosts subscribe to expiry with
``on_expired`` and decide how to recover.
"""

import logging
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import tomli_w

logger = logging.getLogger(__name__)

ExpiredCallback = Callable[["Session"], None]


class Session:
    """Bearer token and user profile for one logged-in user."""

    def __init__(self, token: str | None = None, user: dict[str, Any] | None = None) -> None:
        self._token = token
        self._user = user or {}
        self._expired_callbacks: list[ExpiredCallback] = []

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> dict[str, Any]:
        return dict(self._user)

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def acquire(self, token: str, user: dict[str, Any] | None = None) -> None:
        """Store the credentials returned by a successful login."""
        if not token:
            raise ValueError("Cannot acquire a session without a token")
        self._token = token
        self._user = user or {}

    def clear(self) -> None:
        """Forget the credentials (logout)."""
        self._token = None
        self._user = {}

    def expire(self) -> None:
        """Clear the credentials after the backend rejected them and notify listeners."""
        was_authenticated = self.is_authenticated
        self.clear()
        logger.info("Session expired (was authenticated: %s)", was_authenticated)
        for callback in list(self._expired_callbacks):
            callback(self)

    def on_expired(self, callback: ExpiredCallback) -> Callable[[], None]:
        """Register a session-expired listener.

        Returns:
            A callable that removes the listener again.
        """
        self._expired_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._expired_callbacks:
                self._expired_callbacks.remove(callback)

        return unsubscribe

    def auth_headers(self) -> dict[str, str]:
        """Headers to attach to an outgoing request."""
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}


def get_xdg_state_home() -> Path:
    """Get XDG state directory, with fallback to ~/.local/state."""
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state:
        return Path(xdg_state)
    return Path.home() / ".local" / "state"


def get_session_path() -> Path:
    """Get the session file path (XDG compliant)."""
    return get_xdg_state_home() / "exptrack" / "session.toml"


def load_session(session_path: Path | None = None) -> Session:
    """Load a saved session.

    Args:
        session_path: Path to session file. If None, uses default location.

    Returns:
        The saved session, or an unauthenticated one if nothing is saved.
    """
    if session_path is None:
        session_path = get_session_path()

    if not session_path.exists():
        return Session()

    with open(session_path, "rb") as f:
        data = tomllib.load(f)

    token = data.get("token")
    if not token:
        return Session()
    return Session(token=token, user=data.get("user", {}))


def save_session(session: Session, session_path: Path | None = None) -> None:
    """Save a session with secure permissions.

    Args:
        session: Authenticated session.
        session_path: Path to session file. If None, uses default location.
    """
    if session_path is None:
        session_path = get_session_path()

    if not session.token:
        raise ValueError("Refusing to save an unauthenticated session")

    session_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {"token": session.token}
    user = {key: value for key, value in session.user.items() if value is not None}
    if user:
        data["user"] = user

    with open(session_path, "wb") as f:
        tomli_w.dump(data, f)

    os.chmod(session_path, 0o600)


def delete_session(session_path: Path | None = None) -> bool:
    """Remove a saved session.

    Returns:
        True if a session file was removed.
    """
    if session_path is None:
        session_path = get_session_path()

    if not session_path.exists():
        return False
    session_path.unlink()
    return True
