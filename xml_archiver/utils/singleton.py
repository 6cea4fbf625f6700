"""
Process-wide singleton guard.

An exclusive, non-blocking OS lock on a well-known lock file. The lock is
released by the OS when the holding process exits, so a crashed archiver
never blocks the next start.
"""

import sys
import tempfile
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl


class SingleInstanceLock:
    """Exclusive named lock held for the lifetime of the process."""

    def __init__(self, name: str, lock_dir: Optional[Path] = None):
        """
        Initialize the guard.

        Args:
            name: Well-known lock name shared by every instance
            lock_dir: Directory for the lock file (defaults to the temp dir)
        """
        lock_dir = lock_dir or Path(tempfile.gettempdir())
        self.name = name
        self.path = lock_dir / f"{name}.lock"
        self._handle: Optional[TextIO] = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> bool:
        """
        Try to take the lock without blocking.

        Returns:
            True if this process now holds the lock, False if another does
        """
        if self._handle is not None:
            return True

        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle = self.path.open("a+", encoding="utf-8")

        try:
            if sys.platform == "win32":
                handle.seek(0)
                msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
            else:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            handle.close()
            logger.debug(f"Lock {self.path} is held elsewhere: {e}")
            return False

        self._handle = handle
        logger.debug(f"Acquired lock {self.path}")
        return True

    def release(self):
        """Release the lock if held."""
        if self._handle is None:
            return

        try:
            if sys.platform == "win32":
                self._handle.seek(0)
                msvcrt.locking(self._handle.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None

        logger.debug(f"Released lock {self.path}")

    def __enter__(self) -> "SingleInstanceLock":
        if not self.acquire():
            raise RuntimeError(f"Lock already held: {self.name}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
