"""Translation of service failures into API error responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from model_tracker.schemas.common import ErrorResponse
from model_tracker.services.exceptions import ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)

EMAIL_OVERLOADED = "Email service temporarily overloaded. Please try again in a moment."
TIMED_OUT = "Request timed out. Please try again."
COMMENTARY_UNAVAILABLE = "AI commentary service unavailable"
INTERNAL_ERROR = "Internal server error"

CONNECTION_RESET_MARKERS = ("ECONNRESET", "IMAP")
TIMEOUT_MARKERS = ("timeout", "ETIMEDOUT", "timed out")


def classify_error(exc: Exception) -> tuple[int, str, bool]:
    """
    Map an exception to (status code, user-facing error, retryable).

    Typed failures are classified before the message markers are checked.
    """
    message = str(exc)

    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, message, False
    if isinstance(exc, ConfigurationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "Service is not configured", False
    if "OpenAI API error" in message:
        return status.HTTP_502_BAD_GATEWAY, COMMENTARY_UNAVAILABLE, True
    if any(marker in message for marker in CONNECTION_RESET_MARKERS):
        return status.HTTP_503_SERVICE_UNAVAILABLE, EMAIL_OVERLOADED, True
    if any(marker in message for marker in TIMEOUT_MARKERS):
        return status.HTTP_504_GATEWAY_TIMEOUT, TIMED_OUT, True
    return status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR, False


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for service errors and anything unhandled."""
    status_code, error, retryable = classify_error(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path}: {exc}")

    body = ErrorResponse(error=error, message=str(exc), retryable=retryable, path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))

