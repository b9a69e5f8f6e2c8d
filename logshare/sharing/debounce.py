"""Timer-backed debouncer for logshare option changes.

Each submission overwrites a single pending slot and restarts the timer; only
the value present when the quiet period elapses is delivered.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

TimerFactory = Callable[..., Any]


class Debouncer:
    """Collapse bursts of submissions into one delayed callback.

    Args:
        interval: Quiet period in seconds.
        callback: Called with the latest submitted value, on the timer thread.
        timer_factory: ``threading.Timer``-compatible factory (injectable for tests).
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[Any], None],
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.interval = interval
        self._callback = callback
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._token = 0
        self._pending: Any = None
        self._has_pending = False

    def submit(self, value: Any) -> None:
        """Store ``value`` as the pending value and restart the quiet period."""
        with self._lock:
            self._pending = value
            self._has_pending = True
            self._token += 1
            if self._timer is not None:
                self._timer.cancel()
            timer = self._timer_factory(self.interval, self._fire, args=(self._token,))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _fire(self, token: int) -> None:
        with self._lock:
            # A cancelled timer may still fire if it was already running
            if token != self._token or not self._has_pending:
                return
            value = self._pending
            self._pending = None
            self._has_pending = False
            self._timer = None
        logger.debug("Debounce interval elapsed; delivering %r", value)
        self._callback(value)

    def cancel(self) -> None:
        """Drop the pending value without delivering it."""
        with self._lock:
            self._token += 1
            self._pending = None
            self._has_pending = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
