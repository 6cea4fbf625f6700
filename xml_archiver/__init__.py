"""
XML Archiver

Single-instance background agent that watches a directory for writes to XML
files and consolidates every settled file into one zip archive.
"""

__version__ = "1.0.0"
