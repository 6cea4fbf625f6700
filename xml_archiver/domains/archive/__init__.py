"""
Archive

Merge-and-swap commits of settled files into a single zip archive, plus
read-back and manual recovery helpers.
"""

from .archiver import Archiver, read_entries, read_entry_bytes, recover_staging

__all__ = ["Archiver", "read_entries", "read_entry_bytes", "recover_staging"]
