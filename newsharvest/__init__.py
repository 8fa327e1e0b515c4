"""Scheduled news ingestion and retention for a selector-configured site."""

__version__ = "0.1.0"
