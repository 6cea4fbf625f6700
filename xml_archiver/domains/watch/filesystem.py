"""
File system watcher feeding the settle tracker.

Uses the watchdog library for cross-platform file system event monitoring.
Only content writes to files with the watched suffix are forwarded; every
other event kind is ignored.
"""

from pathlib import Path
from typing import Callable

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from xml_archiver.utils.helpers import has_suffix


class XmlWriteHandler(FileSystemEventHandler):
    """Forwards writes to matching files."""

    def __init__(self, on_write: Callable[[str], None], suffix: str = ".xml"):
        """
        Initialize event handler.

        Args:
            on_write: Called with the path of every matching write
            suffix: File suffix to match, case-insensitively
        """
        super().__init__()
        self.on_write = on_write
        self.suffix = suffix

    def should_process(self, event: FileSystemEvent) -> bool:
        """Check if event concerns a matching file."""
        if event.is_directory:
            return False

        return has_suffix(str(event.src_path), self.suffix)

    def on_modified(self, event: FileSystemEvent):
        """Handle file content writes."""
        if not self.should_process(event):
            return

        logger.debug(f"Written: {event.src_path}")
        self.on_write(str(event.src_path))


class FileSystemWatcher:
    """Watchdog observer bound to one directory."""

    def __init__(self, watch_dir: Path, handler: FileSystemEventHandler, recursive: bool = False):
        self.watch_dir = Path(watch_dir)
        self.handler = handler
        self.recursive = recursive
        self.observer = Observer()
        self.observer.daemon = True

    def start(self):
        """
        Attach to the directory and start delivering events.

        Raises:
            FileNotFoundError: The directory does not exist
            OSError: The platform watcher could not attach
        """
        if not self.watch_dir.is_dir():
            raise FileNotFoundError(f"Watch directory not found: {self.watch_dir}")

        self.observer.schedule(self.handler, str(self.watch_dir), recursive=self.recursive)
        self.observer.start()
        logger.success(f"Started watching: {self.watch_dir}")

    def stop(self):
        """Stop watching."""
        if not self.observer.is_alive():
            return

        self.observer.stop()
        self.observer.join()
        logger.info("File system observer stopped")
