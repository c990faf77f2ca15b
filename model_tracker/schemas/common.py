"""Common response schemas used across the API."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response schemas: snake_case in Python, camelCase on the wire.

    Built from the service-layer dataclasses with ``model_validate``.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        protected_namespaces=(),
        alias_generator=to_camel,
    )


class ErrorResponse(CamelModel):
    """Standard error response format for API errors.

    Attributes:
        error: User-facing error summary
        message: Underlying error message
        retryable: Whether repeating the request may succeed
        timestamp: When the error occurred
        path: Request path that caused the error
    """

    error: str = Field(..., description="User-facing error summary")
    message: str = Field(..., description="Underlying error message")
    retryable: bool = Field(False, description="Whether the client may retry")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    path: str | None = Field(None, description="Request path that caused the error")
