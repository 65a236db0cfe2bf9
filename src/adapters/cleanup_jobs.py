"""
Background room cleanup.

Runs the cleanup component on a fixed interval in a daemon thread, for
single-process deployments.

Key behaviors:
- First pass runs one interval after start, not immediately
- Errors in a pass are logged and the loop keeps going
- stop() returns once the thread has exited (or after a timeout)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from src.components.cleanup import CleanupOutput

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Cleanup scheduler with background polling.

    ``run_pass`` performs one cleanup and returns its output; the scheduler
    only decides when it runs.
    """

    def __init__(
        self,
        run_pass: Callable[[], CleanupOutput],
        interval_seconds: float = 24 * 60 * 60,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            run_pass: Callable performing one cleanup pass
            interval_seconds: Interval between passes
        """
        self._run_pass = run_pass
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    def start(self) -> None:
        """Start the background scheduler."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll_loop, name="room-cleanup", daemon=True)
        self._thread.start()
        self._running = True
        logger.info("Cleanup scheduler started (interval: %.0fs)", self._interval)

    def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Cleanup scheduler stopped")

    def trigger_now(self) -> CleanupOutput:
        """Run a cleanup pass immediately on the calling thread."""
        return self._run_pass()

    @property
    def is_running(self) -> bool:
        """Check if scheduler is active."""
        return self._running

    def _poll_loop(self) -> None:
        """Background polling loop."""
        while not self._stop_event.wait(timeout=self._interval):
            try:
                result = self._run_pass()
                if result.deleted:
                    logger.info("Cleanup removed %d rooms: %s", len(result.deleted), ", ".join(result.deleted))
            except Exception:
                logger.exception("Error in cleanup loop")
