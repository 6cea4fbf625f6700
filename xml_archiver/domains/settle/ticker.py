"""
Periodic driver for the settle tracker.

Fires once per interval on its own thread. Missed ticks are not made up:
if the process stalls, the next tick simply arrives late.
"""

import threading
from typing import Callable, Optional

from loguru import logger


class Ticker:
    """Calls ``on_tick`` every ``interval`` seconds until stopped."""

    def __init__(self, on_tick: Callable[[], object], interval: float = 1.0):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        self.on_tick = on_tick
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start ticking on a daemon thread."""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="settle-ticker", daemon=True)
        self._thread.start()
        logger.info(f"Ticker started ({self.interval}s interval)")

    def run(self):
        """Tick loop; returns once ``stop()`` is called."""
        while not self._stop_event.wait(self.interval):
            try:
                self.on_tick()
            except Exception as e:
                logger.error(f"Tick failed: {e}")

    def stop(self, timeout: Optional[float] = None):
        """Stop ticking and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Ticker stopped")
