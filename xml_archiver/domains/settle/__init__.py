"""
Settle Detection

Turns a storm of write events per file into one "file is stable" signal:
- tracker.py - Per-path countdowns reset by writes
- ticker.py - Periodic driver that advances the countdowns
"""

from .ticker import Ticker
from .tracker import SettleTracker

__all__ = ["SettleTracker", "Ticker"]
