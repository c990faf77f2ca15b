"""Model tracker: daily model portfolio ingestion and change alerts."""

__version__ = "0.1.0"
