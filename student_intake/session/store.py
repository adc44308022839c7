"""Client-side session: bearer token, signed-in user and cached profile.

The session is an explicit object handed to the API client and services
rather than ambient global state. It is initialized from disk on load,
updated on login and logout, and cleared when the server rejects the token.
"""

import json
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from student_intake.errors import AuthenticationError, PermissionDeniedError
from student_intake.models.enums import UserRole
from student_intake.models.user import AuthUser, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = Path("~/.student_intake/session.json")


class SessionStore:
    """Persists the token and user between CLI invocations.

    Attributes:
        path: JSON file holding ``{"token": ..., "user": {...}}``.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path or DEFAULT_SESSION_FILE).expanduser()

    def load(self) -> dict[str, Any] | None:
        """Read the stored session, or None if there is none."""
        if not self.path.exists():
            return None
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def save(self, data: dict[str, Any]) -> None:
        """Write the session file, readable only by the current user."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        """Remove the session file if present."""
        self.path.unlink(missing_ok=True)


class Session:
    """Authentication state shared by the API client and services.

    ``generation`` increases on every login, logout or clear so that work
    started under an older session (e.g. a background profile refresh) can
    recognize that its result is stale.
    """

    def __init__(self, store: SessionStore | None = None) -> None:
        self.store = store
        self.token: str | None = None
        self.user: AuthUser | None = None
        self.profile: UserProfile | None = None
        self.generation = 0
        self._lock = threading.RLock()

    @classmethod
    def load(cls, store: SessionStore | None = None) -> "Session":
        """Create a session, restoring any token saved in ``store``.

        A corrupted session file is discarded and the session starts
        logged out.
        """
        session = cls(store)
        if store is None:
            return session

        try:
            data = store.load()
            if data is not None and not isinstance(data, dict):
                raise ValueError("session file does not hold a JSON object")
            if data and data.get("token") and data.get("user"):
                session.token = data["token"]
                session.user = AuthUser.model_validate(data["user"])
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Discarding unreadable session file %s: %s", store.path, e)
            store.clear()
            session.token = None
            session.user = None
        return session

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def role(self) -> UserRole:
        """Role of the signed-in user; users without one are public."""
        if self.profile is not None and self.profile.role is not None:
            return self.profile.role
        if self.user is not None and self.user.role is not None:
            return self.user.role
        return UserRole.PUBLIC

    def login(self, token: str, user: AuthUser) -> None:
        """Start a new authenticated session."""
        with self._lock:
            self.token = token
            self.user = user
            self.profile = None
            self.generation += 1
            if self.store is not None:
                self.store.save({"token": token, "user": user.model_dump(mode="json")})
        logger.info("Signed in as %s", user.email)

    def logout(self) -> None:
        """End the session and forget the stored token."""
        self.clear()
        logger.info("Signed out")

    def clear(self) -> None:
        """Drop all credentials (also used when the server returns 401)."""
        with self._lock:
            self.token = None
            self.user = None
            self.profile = None
            self.generation += 1
            if self.store is not None:
                self.store.clear()

    def set_profile(self, profile: UserProfile, generation: int | None = None) -> bool:
        """Store a fetched profile unless the session changed meanwhile.

        Args:
            profile: Freshly fetched profile.
            generation: Session generation when the fetch started.

        Returns:
            True if the profile was stored, False if it was stale.
        """
        with self._lock:
            if generation is not None and generation != self.generation:
                return False
            if not self.is_authenticated:
                return False
            self.profile = profile
            return True

    def auth_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


def require_role(session: Session, allowed: Iterable[UserRole]) -> UserRole:
    """Gate an operation on the signed-in user's role.

    Returns:
        The user's role.

    Raises:
        AuthenticationError: If nobody is signed in.
        PermissionDeniedError: If the role is not allowed.
    """
    if not session.is_authenticated:
        raise AuthenticationError("Please log in to continue.")
    role = session.role
    if role not in set(allowed):
        raise PermissionDeniedError(
            "You do not have permission to access this resource."
        )
    return role
