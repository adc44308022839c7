"""Periodic background refresh of the signed-in user's profile."""

import logging
import threading
from collections.abc import Callable

from student_intake.errors import ApiError
from student_intake.models.user import UserProfile
from student_intake.session.store import Session

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 5 * 60.0


class ProfileRefresher:
    """Refreshes ``session.profile`` on a fixed interval.

    - At most one refresh runs at a time; a tick that finds one in flight is
      skipped.
    - A response that arrives after the session changed (logout, new login)
      is discarded.
    - Failures are logged and ignored so the last good profile stays in place.

    Args:
        session: Session whose profile is refreshed.
        fetch: Callable returning the current profile.
        interval: Seconds between refreshes.
    """

    def __init__(
        self,
        session: Session,
        fetch: Callable[[], UserProfile],
        interval: float = DEFAULT_REFRESH_INTERVAL,
    ) -> None:
        self.session = session
        self.fetch = fetch
        self.interval = interval
        self._in_flight = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def refresh_once(self) -> bool:
        """Run a single refresh.

        Returns:
            True if a new profile was stored.
        """
        if not self.session.is_authenticated:
            return False
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Profile refresh already in flight, skipping")
            return False

        try:
            generation = self.session.generation
            try:
                profile = self.fetch()
            except ApiError as e:
                logger.warning("Background profile refresh failed: %s", e.message)
                return False

            if not self.session.set_profile(profile, generation):
                logger.debug("Discarding stale profile response")
                return False
            return True
        finally:
            self._in_flight.release()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.refresh_once()

    def start(self) -> None:
        """Start refreshing in a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="profile-refresher", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the background thread."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
