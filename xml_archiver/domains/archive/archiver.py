"""
Incremental archive rewrite.

A commit never edits the archive in place. The current archive is parked
under its staging name, a fresh archive is written holding every entry of
the parked version followed by the newly settled file, and the parked
version stays behind as the rollback point until the next commit discards it.

Only the final append decides whether a commit failed. Problems staging or
reading the previous version are logged and the commit carries on with
whatever previous entries it could recover.
"""

import zipfile
import zlib
from pathlib import Path
from typing import Optional

from loguru import logger

from xml_archiver.models.schemas import ArchiveEntry
from xml_archiver.utils.helpers import entry_name_for, staging_path_for

# Errors that can surface while reading a damaged or unsupported previous archive
_READ_ERRORS = (OSError, EOFError, zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError)


class Archiver:
    """Owns the archive file and merges settled files into it."""

    def __init__(
        self,
        archive_path: Path,
        root: Optional[Path] = None,
        staging_prefix: str = "_",
        compression_level: Optional[int] = None,
    ):
        """
        Initialize archiver.

        Args:
            archive_path: Archive file to maintain
            root: Directory entry names are made relative to
            staging_prefix: Prefix of the staging file name
            compression_level: Deflate level, None for the zlib default
        """
        self.archive_path = Path(archive_path)
        self.root = Path(root) if root is not None else None
        self.staging_path = staging_path_for(self.archive_path, staging_prefix)
        self.compression_level = compression_level

    def commit(self, file_path) -> str:
        """
        Merge one file into the archive.

        Args:
            file_path: File to append as the newest entry

        Returns:
            Name of the appended entry

        Raises:
            OSError: The new archive could not be created or the file could
                not be appended; the previous entries are kept either way
        """
        file_path = Path(file_path)

        self._discard_staging()
        has_previous = self._stage_previous()

        with zipfile.ZipFile(
            self.archive_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
            strict_timestamps=False,
        ) as target:
            if has_previous:
                copied = self._copy_previous(target)
                logger.debug(f"Carried over {copied} entries from {self.staging_path}")

            return self._append_file(target, file_path)

    def _discard_staging(self):
        """Remove a staging file left behind by an earlier commit."""
        try:
            self.staging_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove stale staging file {self.staging_path}: {e}")

    def _stage_previous(self) -> bool:
        """
        Park the current archive under the staging name.

        Returns:
            True if there is a previous version to copy from
        """
        if not self.archive_path.exists():
            return False

        try:
            self.archive_path.replace(self.staging_path)
            return True

        except OSError as e:
            # The archive is recreated regardless, so its entries are lost here
            logger.warning(
                f"Could not stage {self.archive_path} as {self.staging_path}, "
                f"previous entries will be dropped: {e}"
            )
            return False

    def _copy_previous(self, target: zipfile.ZipFile) -> int:
        """
        Copy every entry of the staged archive into ``target`` in order.

        Args:
            target: Archive being written

        Returns:
            Number of entries copied
        """
        copied = 0

        try:
            previous = zipfile.ZipFile(self.staging_path)
        except _READ_ERRORS as e:
            logger.warning(f"Could not open previous archive {self.staging_path}: {e}")
            return copied

        with previous:
            for info in previous.infolist():
                # Read fully first so a damaged entry never reaches the new archive
                try:
                    data = previous.read(info)
                except _READ_ERRORS as e:
                    logger.warning(f"Could not copy entry {info.filename}: {e}")
                    continue

                try:
                    target.writestr(_clone_info(info), data)
                except OSError as e:
                    logger.warning(f"Could not write entry {info.filename}: {e}")
                    continue

                copied += 1

        return copied

    def _append_file(self, target: zipfile.ZipFile, file_path: Path) -> str:
        """Append ``file_path`` from the live filesystem as the last entry."""
        if file_path.is_dir():
            raise IsADirectoryError(f"Not a file: {file_path}")

        name = entry_name_for(file_path, self.root)
        target.write(
            file_path,
            arcname=name,
            compress_type=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        )

        logger.success(f"Zipped file: {name}")
        return name


def _clone_info(info: zipfile.ZipInfo) -> zipfile.ZipInfo:
    """Fresh directory record carrying an entry's name and metadata."""
    clone = zipfile.ZipInfo(info.filename, date_time=info.date_time)
    clone.compress_type = info.compress_type
    clone.create_system = info.create_system
    clone.external_attr = info.external_attr
    clone.comment = info.comment
    return clone


def read_entries(archive_path: Path) -> list[ArchiveEntry]:
    """
    List the entries of an archive in archive order.

    Args:
        archive_path: Archive to read

    Returns:
        One ArchiveEntry per member, duplicates included
    """
    with zipfile.ZipFile(archive_path) as archive:
        return [ArchiveEntry.from_zipinfo(i, info) for i, info in enumerate(archive.infolist())]


def read_entry_bytes(archive_path: Path, name: str, occurrence: int = -1) -> bytes:
    """
    Read the content of one entry.

    Args:
        archive_path: Archive to read
        name: Entry name
        occurrence: Which same-named entry to read, in archive order
            (default: the last one)

    Returns:
        Entry content

    Raises:
        KeyError: No entry has that name
        IndexError: Fewer same-named entries than ``occurrence`` asks for
    """
    with zipfile.ZipFile(archive_path) as archive:
        matches = [info for info in archive.infolist() if info.filename == name]
        if not matches:
            raise KeyError(name)
        return archive.read(matches[occurrence])


def recover_staging(archive_path: Path, staging_prefix: str = "_") -> bool:
    """
    Put the staged previous version back in place of the archive.

    Used after a crash during a commit, when the archive may be incomplete.

    Args:
        archive_path: Live archive path
        staging_prefix: Prefix of the staging file name

    Returns:
        True if a staging file was restored, False if there was none
    """
    archive_path = Path(archive_path)
    staging = staging_path_for(archive_path, staging_prefix)

    if not staging.exists():
        return False

    staging.replace(archive_path)
    logger.success(f"Restored {archive_path} from {staging}")
    return True
