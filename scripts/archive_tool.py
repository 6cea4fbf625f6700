#!/usr/bin/env python3
"""Operator commands for the XML archive.

Lists archive entries, extracts one entry, or restores the staged previous
version after a commit was interrupted.  Paths default to the archiver's
configured archive but can be given explicitly.
"""

from __future__ import annotations

import argparse
import sys
import zipfile
from pathlib import Path
from typing import Optional

from loguru import logger

from xml_archiver.domains.archive import read_entries, read_entry_bytes, recover_staging
from xml_archiver.utils.config import get_settings
from xml_archiver.utils.helpers import staging_path_for
from xml_archiver.utils.singleton import SingleInstanceLock


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    settings = get_settings()

    parser = argparse.ArgumentParser(description="Inspect or recover the XML archive.")
    parser.add_argument(
        "--archive",
        type=Path,
        default=settings.get_archive_path(),
        help="Archive to operate on (default: the configured archive).",
    )
    parser.add_argument(
        "--staging-prefix",
        default=settings.staging_prefix,
        help="Prefix of the staging file name (default: %(default)s).",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List entries in archive order.")

    extract = commands.add_parser("extract", help="Write one entry's content out.")
    extract.add_argument("name", help="Entry name.")
    extract.add_argument(
        "--occurrence",
        type=int,
        default=-1,
        help="Which same-named entry to extract, in archive order (default: last).",
    )
    extract.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout).",
    )

    commands.add_parser(
        "recover",
        help="Restore the staged previous archive. Refused while the archiver runs.",
    )

    return parser.parse_args(argv)


def list_entries(archive: Path) -> int:
    for entry in read_entries(archive):
        print(
            f"{entry.index:>5}  {entry.size:>10}  {entry.compressed_size:>10}  "
            f"{entry.modified:%Y-%m-%d %H:%M:%S}  {entry.name}"
        )
    return 0


def extract_entry(archive: Path, name: str, occurrence: int, output: Optional[Path]) -> int:
    try:
        content = read_entry_bytes(archive, name, occurrence)
    except (KeyError, IndexError):
        logger.error(f"No entry {name!r} (occurrence {occurrence}) in {archive}")
        return 1

    if output is None:
        sys.stdout.buffer.write(content)
    else:
        output.write_bytes(content)
        logger.success(f"Extracted {name} to {output}")
    return 0


def recover(archive: Path, staging_prefix: str) -> int:
    # A running archiver would discard the staging file on its next commit
    lock = SingleInstanceLock(get_settings().lock_name)
    if not lock.acquire():
        logger.error("Archiver is running; stop it before recovering")
        return 1

    try:
        if not recover_staging(archive, staging_prefix):
            logger.info(f"Nothing to recover: {staging_path_for(archive, staging_prefix)} not found")
    finally:
        lock.release()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)

    if args.command == "recover":
        return recover(args.archive, args.staging_prefix)

    try:
        if args.command == "list":
            return list_entries(args.archive)
        return extract_entry(args.archive, args.name, args.occurrence, args.output)
    except (OSError, zipfile.BadZipFile) as e:
        logger.error(f"Cannot read {args.archive}: {e}")
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
