"""JSON-over-HTTP base for the Google Sheets and OpenAI clients.

Timeouts, refused connections, rate limiting (429) and 5xx responses are
retried with exponential backoff; any other error status fails at once.
Every failure surfaces as HTTPClientError naming the upstream service, which
the concrete clients wrap in UpstreamFetchError.
"""

import logging
from typing import Any, Self

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HTTPClientError(Exception):
    """An upstream JSON API call failed.

    Attributes:
        status_code: HTTP status, None for transport failures
        response_body: Raw body of the error response, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RetryableStatusError(Exception):
    """Internal marker for a status worth another attempt."""

    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.ConnectError, RetryableStatusError)


def status_error(response: httpx.Response) -> HTTPClientError:
    return HTTPClientError(
        message=f"HTTP {response.status_code}: {response.reason_phrase}",
        status_code=response.status_code,
        response_body=response.text,
    )


class HTTPClient:
    """Base class for the JSON API clients.

    Subclasses pass their base URL and default headers, then call
    ``get_json`` / ``post_json`` with paths relative to it::

        class SheetsClient(HTTPClient):
            def __init__(self, token: str):
                super().__init__(
                    base_url="https://sheets.googleapis.com/v4",
                    headers={"Authorization": f"Bearer {token}"},
                )

            def get_values(self, sheet_id: str, cell_range: str) -> dict:
                return self.get_json(f"/spreadsheets/{sheet_id}/values/{cell_range}")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        headers: dict[str, str] | None = None,
    ):
        self.base_url = base_url or ""
        self.timeout = timeout
        self.max_retries = max_retries
        self.default_headers = headers or {}
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Underlying httpx client, created on first use."""
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, headers=self.default_headers)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _attempt(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.client.request(method, path, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(f"{method} {path} returned HTTP {response.status_code}, retrying")
            raise RetryableStatusError(response)
        return response

    def request_json(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
        headers: dict | None = None,
    ) -> Any:
        """
        Send a request and decode the JSON body.

        Args:
            method: HTTP method
            path: Path relative to base_url
            params: Query parameters
            json: JSON request body
            headers: Merged over the default headers

        Raises:
            HTTPClientError: On an error status, exhausted retries, or a body
                that is not JSON
        """
        merged_headers = {**self.default_headers, **(headers or {})}
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    response = self._attempt(method, path, params=params, json=json, headers=merged_headers)
        except RetryableStatusError as e:
            raise status_error(e.response) from e
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout for {method} {path}")
            raise HTTPClientError(f"Request timed out: {path}") from e
        except httpx.ConnectError as e:
            logger.warning(f"Connection error for {method} {path}: {e}")
            raise HTTPClientError(f"Connection failed: {path}") from e

        if response.is_error:
            logger.warning(f"HTTP {response.status_code} for {method} {path}: {response.text[:200]}")
            raise status_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise HTTPClientError(f"Invalid JSON from {path}", response.status_code, response.text) from e

    def get_json(self, path: str, params: dict | None = None, headers: dict | None = None) -> Any:
        return self.request_json("GET", path, params=params, headers=headers)

    def post_json(self, path: str, json: dict | None = None, headers: dict | None = None) -> Any:
        return self.request_json("POST", path, json=json, headers=headers)
