"""
XML Archiver Domains

- settle - Debounce write bursts into one settle signal per file
- delivery - Retrying queue between settle detection and the archiver
- archive - Merge-and-swap rewrite of the zip archive
- watch - watchdog adapter producing write notifications
"""

__all__ = ["archive", "delivery", "settle", "watch"]
