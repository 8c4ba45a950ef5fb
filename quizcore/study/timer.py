"""
Cancelable countdown for timed full-test sessions.

The countdown is owned by the session. It fires its expiry callback
exactly once when it reaches zero, and never after cancel(). Ticks can
be driven manually (tests, simulations) or by a background
threading.Timer chain (start_realtime).
"""

from __future__ import annotations

import threading
from typing import Callable

from loguru import logger


class CountdownTimer:
    """
    Whole-second countdown with a one-shot expiry callback.

    Usage:
        timer = CountdownTimer(3600, on_expire=session_auto_submit)
        timer.start_realtime()
        # ... session ends some other way ...
        timer.cancel()
    """

    def __init__(
        self,
        duration_seconds: int,
        on_expire: Callable[[], None] | None = None,
    ):
        """
        Initialize the countdown.

        Args:
            duration_seconds: Starting value in whole seconds
            on_expire: Called once when the countdown reaches zero
        """
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds must be >= 0, got {duration_seconds}")

        self.duration_seconds = int(duration_seconds)
        self._remaining = int(duration_seconds)
        self._on_expire = on_expire

        self._expired = False
        self._cancelled = False
        self._lock = threading.Lock()
        self._driver: threading.Timer | None = None
        self._interval = 1.0

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_active(self) -> bool:
        """True until the countdown expires or is cancelled."""
        return not (self._expired or self._cancelled)

    def tick(self, seconds: int = 1) -> bool:
        """
        Advance the countdown.

        Args:
            seconds: Seconds elapsed since the previous tick

        Returns:
            True if this tick expired the countdown
        """
        with self._lock:
            if not self.is_active:
                return False

            self._remaining = max(0, self._remaining - seconds)
            if self._remaining > 0:
                return False

            self._expired = True
            self._stop_driver()

        logger.info("Countdown reached zero after {}s", self.duration_seconds)
        if self._on_expire is not None:
            self._on_expire()
        return True

    def cancel(self) -> bool:
        """
        Cancel the countdown so it can never fire.

        Returns:
            True if the countdown was active and is now cancelled
        """
        with self._lock:
            if not self.is_active:
                return False
            self._cancelled = True
            self._stop_driver()

        logger.debug("Countdown cancelled with {}s remaining", self._remaining)
        return True

    def start_realtime(self, interval: float = 1.0) -> None:
        """
        Drive one-second ticks from a background daemon timer.

        Args:
            interval: Wall-clock seconds between ticks
        """
        with self._lock:
            if not self.is_active or self._driver is not None:
                return
            self._interval = interval
            self._schedule_next()

    def format_remaining(self) -> str:
        """Remaining time as MM:SS."""
        mins, secs = divmod(self._remaining, 60)
        return f"{mins:02d}:{secs:02d}"

    def _schedule_next(self) -> None:
        self._driver = threading.Timer(self._interval, self._realtime_tick)
        self._driver.daemon = True
        self._driver.start()

    def _realtime_tick(self) -> None:
        self.tick(1)
        with self._lock:
            if self.is_active:
                self._schedule_next()

    def _stop_driver(self) -> None:
        if self._driver is not None:
            self._driver.cancel()
            self._driver = None
