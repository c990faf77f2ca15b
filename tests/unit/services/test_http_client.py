"""Tests for the shared HTTP client."""

from unittest.mock import patch

import httpx
import pytest
from tenacity import wait_none

from model_tracker.services.shared import HTTPClient, HTTPClientError


def client_with(handler, max_retries: int = 3) -> HTTPClient:
    client = HTTPClient(base_url="https://api.example.com", max_retries=max_retries, headers={"X-Default": "1"})
    client._client = httpx.Client(base_url="https://api.example.com", transport=httpx.MockTransport(handler))
    return client


@pytest.fixture(autouse=True)
def no_backoff():
    with patch("model_tracker.services.shared.http_client.wait_exponential", return_value=wait_none()):
        yield


def test_get_json_merges_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, json={"values": [["a", "b"]]})

    client = client_with(handler)

    assert client.get_json("/values", headers={"Authorization": "Bearer token"}) == {"values": [["a", "b"]]}
    assert seen["x-default"] == "1"
    assert seen["authorization"] == "Bearer token"


def test_client_error_status_is_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403, text="forbidden")

    client = client_with(handler)

    with pytest.raises(HTTPClientError) as exc_info:
        client.get_json("/values")

    assert exc_info.value.status_code == 403
    assert exc_info.value.response_body == "forbidden"
    assert str(exc_info.value) == "HTTP 403: Forbidden"
    assert len(calls) == 1


def test_rate_limit_is_retried_until_success():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(429, text="slow down")
        return httpx.Response(200, json={"choices": []})

    client = client_with(handler)

    assert client.post_json("/chat/completions", json={"model": "gpt-4"}) == {"choices": []}
    assert len(calls) == 3


def test_server_errors_exhaust_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, text="unavailable")

    client = client_with(handler, max_retries=2)

    with pytest.raises(HTTPClientError) as exc_info:
        client.get_json("/values")

    assert exc_info.value.status_code == 503
    assert len(calls) == 2


def test_timeouts_are_retried_then_reported():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    client = client_with(handler, max_retries=3)

    with pytest.raises(HTTPClientError, match="Request timed out"):
        client.post_json("/chat/completions", json={"model": "gpt-4"})

    assert len(calls) == 3


def test_transient_connection_error_recovers():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"ok": True})

    client = client_with(handler)

    assert client.get_json("/health") == {"ok": True}
    assert len(calls) == 2


def test_non_json_body_is_an_error():
    client = client_with(lambda request: httpx.Response(200, text="<html>login</html>"))

    with pytest.raises(HTTPClientError, match="Invalid JSON"):
        client.get_json("/values")


def test_context_manager_closes_client():
    with HTTPClient(base_url="https://api.example.com") as client:
        assert client.client is not None
    assert client._client is None
