"""
Watch Source

Adapts watchdog notifications to settle-tracker touches.
"""

from .filesystem import FileSystemWatcher, XmlWriteHandler

__all__ = ["FileSystemWatcher", "XmlWriteHandler"]
