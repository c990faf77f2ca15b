"""Shared base classes for the services layer.

- HTTPClient: Base class for the JSON API clients with retry logic
- HTTPClientError: Exception for HTTP client failures
"""

from .http_client import HTTPClient, HTTPClientError

__all__ = ["HTTPClient", "HTTPClientError"]
