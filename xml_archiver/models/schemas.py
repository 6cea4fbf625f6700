"""
Data models for the XML archiver.

Value types describing what is stored inside the archive.
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class ArchiveEntry:
    """One member of the archive, in archive order.

    Names are not unique: committing the same file twice stores it twice.
    """

    index: int
    name: str
    size: int
    compressed_size: int
    modified: datetime
    mode: int
    compressed: bool

    @classmethod
    def from_zipinfo(cls, index: int, info: zipfile.ZipInfo) -> ArchiveEntry:
        """Build an entry description from a zip directory record."""

        return cls(
            index=index,
            name=info.filename,
            size=info.file_size,
            compressed_size=info.compress_size,
            modified=datetime(*info.date_time),
            mode=(info.external_attr >> 16) & 0o7777,
            compressed=info.compress_type != zipfile.ZIP_STORED,
        )
