#!/usr/bin/env python3
"""
XML Archiver - process entry point.

Acquires the singleton lock, starts the archiver service and blocks until
the process is asked to stop.
"""

import signal
import sys
import threading

from loguru import logger
from pydantic import ValidationError

from xml_archiver.service import XmlArchiverService
from xml_archiver.utils.config import Settings, get_settings
from xml_archiver.utils.helpers import staging_path_for
from xml_archiver.utils.singleton import SingleInstanceLock

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", log_file=None):
    """Replace the default loguru sink with the archiver's sinks."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level)

    if log_file:
        logger.add(log_file, format=LOG_FORMAT, level=level, rotation="10 MB", retention=5)


def warn_stale_staging(settings: Settings):
    """Point out a staging file left by an interrupted commit."""
    staging = staging_path_for(settings.get_archive_path(), settings.staging_prefix)
    if staging.exists():
        logger.warning(
            f"Found staging file {staging} from an interrupted commit; "
            f"it will be discarded by the next commit (see scripts/archive_tool.py recover)"
        )


def main() -> int:
    """Main entry point."""
    configure_logging()
    logger.info("XML Archiver")

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings.log_level, settings.log_file)

    lock = SingleInstanceLock(settings.lock_name)
    if not lock.acquire():
        logger.error("Program already running")
        return 1

    try:
        warn_stale_staging(settings)

        stop_event = threading.Event()

        def _signal_handler(signum, frame):  # noqa: D401
            logger.info(f"Received signal {signum}, shutting down.")
            stop_event.set()

        # Before startup: a signal during start only requests shutdown
        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)

        try:
            service = XmlArchiverService(settings)
            service.start()
        except Exception as e:
            logger.error(f"Failed to watch {settings.watch_dir}: {e}")
            return 1

        while not stop_event.is_set():
            stop_event.wait(60)

        service.stop()
        logger.info("XML archiver stopped")

    finally:
        lock.release()

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
