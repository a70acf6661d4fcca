"""DocSense - AI-assisted invoice extraction and transaction enrichment."""

__version__ = "0.1.0"
