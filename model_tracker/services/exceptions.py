"""Service-layer exceptions.

These exceptions give semantic meaning to failures in the ingestion pipeline,
separating configuration problems and upstream outages from parse misses
(which are never raised, only reported).
"""


class ModelTrackerError(Exception):
    """Base exception for model tracker operations."""


class ConfigurationError(ModelTrackerError):
    """A required credential or setting is missing or unreadable."""

    def __init__(self, setting: str, detail: str | None = None):
        self.setting = setting
        message = f"Missing or invalid configuration: {setting}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class UpstreamFetchError(ModelTrackerError):
    """Mail, spreadsheet or LLM collaborator failed."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class TradingCalendarError(ModelTrackerError):
    """Trading-day search ran past its bound."""


class NotFoundError(ModelTrackerError):
    """Requested entity not found."""

    def __init__(self, entity_type: str, identifier: str):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(f"{entity_type} not found: {identifier}")
