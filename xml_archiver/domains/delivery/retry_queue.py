"""
Retrying hand-off between settle detection and the archiver.

Settled paths are pushed onto an unbounded FIFO. A single consumer pops one
path at a time and commits it; a failed commit pushes the same path back to
the tail and pauses for ``retry_delay`` before the next pop. With
``max_attempts`` unset a path is retried for as long as the process runs.
"""

import queue
import threading
import time
from typing import Callable, Dict, Optional

from loguru import logger


class DeliveryQueue:
    """Unbounded FIFO with a single committing consumer."""

    def __init__(
        self,
        commit: Callable[[str], object],
        retry_delay: float = 1.0,
        max_attempts: Optional[int] = None,
        poll_interval: float = 0.5,
    ):
        """
        Initialize delivery queue.

        Args:
            commit: Archives one path; raising means the attempt failed
            retry_delay: Pause after a failed attempt (seconds)
            max_attempts: Attempts per path before it is dropped, None for no limit
            poll_interval: How often an idle consumer checks for shutdown
        """
        self.commit = commit
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval

        self._queue: "queue.SimpleQueue[str]" = queue.SimpleQueue()
        self._failures: Dict[str, int] = {}
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def enqueue(self, path: str):
        """Push a path; never blocks."""
        self._queue.put(path)
        logger.debug(f"Queued: {path}")

    def __len__(self) -> int:
        return self._queue.qsize()

    def process_next(self, timeout: Optional[float] = None) -> Optional[bool]:
        """
        Pop one path and commit it.

        Args:
            timeout: How long to wait for a path, None to block

        Returns:
            True on success, False on a failed attempt, None if nothing arrived
        """
        try:
            path = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

        try:
            self.commit(path)
        except Exception as e:
            logger.error(f"Retry with: {e}")
            self._handle_failure(path)
            time.sleep(self.retry_delay)
            return False

        self._failures.pop(path, None)
        return True

    def _handle_failure(self, path: str):
        """Requeue a failed path unless it ran out of attempts."""
        attempts = self._failures.get(path, 0) + 1

        if self.max_attempts is not None and attempts >= self.max_attempts:
            self._failures.pop(path, None)
            logger.error(f"Giving up on {path} after {attempts} attempts")
            return

        self._failures[path] = attempts
        self.enqueue(path)

    def start(self):
        """Start the consumer on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="archive-consumer", daemon=True)
        self._thread.start()
        logger.info("Delivery consumer started")

    def run(self):
        """Consume until ``stop()`` is called."""
        while not self._stop_event.is_set():
            self.process_next(timeout=self.poll_interval)

    def stop(self, timeout: Optional[float] = None):
        """Stop the consumer after its current commit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info(f"Delivery consumer stopped ({len(self)} paths pending)")
