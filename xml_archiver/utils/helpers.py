"""
Helper utilities for the XML archiver.

Path predicates and naming rules shared by the watcher and the archiver.
"""

from pathlib import Path
from typing import Optional


def has_suffix(path: str, suffix: str = ".xml") -> bool:
    """Case-insensitive suffix check on the final path component."""
    return Path(path).suffix.lower() == suffix.lower()


def staging_path_for(archive_path: Path, prefix: str = "_") -> Path:
    """
    Get the staging name for an archive.

    The previous archive version is parked beside the archive under the
    same name with ``prefix`` prepended.

    Args:
        archive_path: Path of the live archive
        prefix: Staging prefix

    Returns:
        Staging file path
    """
    return archive_path.with_name(prefix + archive_path.name)


def entry_name_for(file_path: Path, root: Optional[Path] = None) -> str:
    """
    Get the archive entry name for a file.

    Paths below ``root`` keep their folder structure relative to it; anything
    else keeps the path it was given. Separators are always forward slashes.

    Args:
        file_path: File being archived
        root: Directory the entry names are relative to

    Returns:
        Entry name
    """
    name = file_path
    if root is not None:
        try:
            name = file_path.absolute().relative_to(root.absolute())
        except ValueError:
            name = file_path

    return name.as_posix()
