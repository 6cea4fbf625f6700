"""
Settle detection for written files.

Editors and copy tools emit a burst of write events per logical save. The
tracker keeps a countdown per path that every write resets; a path whose
countdown runs out has been quiet for ``settle_ticks`` consecutive ticks and
is emitted exactly once.
"""

import threading
from typing import Callable, Dict

from loguru import logger


class SettleTracker:
    """Per-path countdowns guarded by a single lock."""

    def __init__(self, on_settled: Callable[[str], None], settle_ticks: int = 5):
        """
        Initialize tracker.

        Args:
            on_settled: Called with each path whose countdown reached zero;
                must not block
            settle_ticks: Countdown reset value
        """
        if settle_ticks < 1:
            raise ValueError(f"settle_ticks must be >= 1, got {settle_ticks}")

        self.on_settled = on_settled
        self.settle_ticks = settle_ticks
        self._countdowns: Dict[str, int] = {}
        self._lock = threading.Lock()

    def touch(self, path: str):
        """Record a write to ``path``, (re)starting its countdown."""
        with self._lock:
            restarted = path in self._countdowns
            self._countdowns[path] = self.settle_ticks

        logger.debug(f"{'Reset' if restarted else 'Tracking'}: {path}")

    def tick(self) -> list[str]:
        """
        Advance every countdown by one tick.

        Paths reaching zero are handed to ``on_settled`` and forgotten.

        Returns:
            Paths emitted by this tick
        """
        settled = []

        with self._lock:
            for path in list(self._countdowns):
                countdown = self._countdowns[path] - 1
                if countdown > 0:
                    self._countdowns[path] = countdown
                    continue

                try:
                    self.on_settled(path)
                except Exception as e:
                    # Stays tracked so the next tick emits it again
                    self._countdowns[path] = 1
                    logger.error(f"Could not hand off {path}: {e}")
                    continue

                del self._countdowns[path]
                settled.append(path)

        for path in settled:
            logger.info(f"Settled: {path}")

        return settled

    def pending(self) -> Dict[str, int]:
        """Snapshot of the tracked paths and their remaining ticks."""
        with self._lock:
            return dict(self._countdowns)

    def __len__(self) -> int:
        with self._lock:
            return len(self._countdowns)

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._countdowns
