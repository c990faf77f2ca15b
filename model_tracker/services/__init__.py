"""Services layer - parsing, assembly, change detection and integrations.

This module is organized into domain-based subpackages:
- email_parsing/: Vendor email table extraction and row parsing
- portfolio/: Account assembly and currency grouping
- analysis/: Watch list and commentary analysis
- clients/: IMAP, Google Sheets and OpenAI clients
- shared/: Shared base classes
"""

from model_tracker.services.exceptions import (
    ConfigurationError,
    ModelTrackerError,
    NotFoundError,
    TradingCalendarError,
    UpstreamFetchError,
)

__all__ = [
    "ConfigurationError",
    "ModelTrackerError",
    "NotFoundError",
    "TradingCalendarError",
    "UpstreamFetchError",
]
