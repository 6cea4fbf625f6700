"""
Composition of the archiver's activities.

Three independent activities run concurrently:
- the watchdog observer touching the settle tracker on every XML write
- the ticker advancing countdowns and queueing settled paths
- the delivery consumer committing queued paths one at a time

The archive is only ever written by the delivery consumer.
"""

from typing import Optional

from loguru import logger

from xml_archiver.domains.archive import Archiver
from xml_archiver.domains.delivery import DeliveryQueue
from xml_archiver.domains.settle import SettleTracker, Ticker
from xml_archiver.domains.watch import FileSystemWatcher, XmlWriteHandler
from xml_archiver.utils.config import Settings, get_settings


class XmlArchiverService:
    """Wires watcher, tracker, ticker, queue and archiver together."""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize service.

        Args:
            settings: Settings to use (defaults to the environment)
        """
        self.settings = settings or get_settings()
        watch_dir = self.settings.watch_dir.expanduser()

        self.archiver = Archiver(
            self.settings.get_archive_path(),
            root=watch_dir,
            staging_prefix=self.settings.staging_prefix,
            compression_level=self.settings.compression_level,
        )
        self.queue = DeliveryQueue(
            self.archiver.commit,
            retry_delay=self.settings.retry_delay,
            max_attempts=self.settings.max_attempts,
        )
        self.tracker = SettleTracker(self.queue.enqueue, settle_ticks=self.settings.settle_ticks)
        self.ticker = Ticker(self.tracker.tick, interval=self.settings.tick_interval)
        self.watcher = FileSystemWatcher(
            watch_dir,
            XmlWriteHandler(self.tracker.touch, suffix=self.settings.watch_suffix),
            recursive=self.settings.recursive,
        )

        logger.info(f"Archive: {self.archiver.archive_path}")
        logger.info(
            f"Settle after {self.settings.settle_ticks} ticks of {self.settings.tick_interval}s"
        )

    def start(self):
        """
        Start all activities.

        Raises:
            OSError: The watcher could not attach to the watch directory;
                nothing is left running
        """
        self.queue.start()
        self.ticker.start()

        try:
            self.watcher.start()
        except Exception:
            self.ticker.stop()
            self.queue.stop()
            raise

        logger.success("XML archiver running")

    def stop(self):
        """Stop all activities; a commit in flight is allowed to finish."""
        self.watcher.stop()
        self.ticker.stop()
        self.queue.stop()

        pending = len(self.tracker)
        if pending:
            logger.warning(f"{pending} files had not settled at shutdown")
