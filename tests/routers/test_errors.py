"""Tests for API error classification and the root endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from model_tracker import __version__
from model_tracker.dependencies import get_account_service
from model_tracker.main import app
from model_tracker.routers.errors import (
    COMMENTARY_UNAVAILABLE,
    EMAIL_OVERLOADED,
    INTERNAL_ERROR,
    TIMED_OUT,
    classify_error,
)
from model_tracker.services.exceptions import ConfigurationError, NotFoundError, UpstreamFetchError


@pytest.mark.parametrize(
    "exc, expected",
    [
        (NotFoundError("Account", "Glen RESP"), (404, "Account not found: Glen RESP", False)),
        (ConfigurationError("OPENAI_API_KEY"), (500, "Service is not configured", False)),
        (UpstreamFetchError("OpenAI API error", "timed out"), (502, COMMENTARY_UNAVAILABLE, True)),
        (UpstreamFetchError("IMAP", "socket error"), (503, EMAIL_OVERLOADED, True)),
        (ConnectionResetError("read ECONNRESET"), (503, EMAIL_OVERLOADED, True)),
        (TimeoutError("connect ETIMEDOUT"), (504, TIMED_OUT, True)),
        (UpstreamFetchError("Google Sheets", "Request timed out"), (504, TIMED_OUT, True)),
        (ValueError("unexpected"), (500, INTERNAL_ERROR, False)),
    ],
)
def test_classify_error(exc, expected):
    assert classify_error(exc) == expected


def test_not_found_is_classified_before_message_markers():
    # An account name containing "IMAP" must not turn a 404 into a 503
    assert classify_error(NotFoundError("Account", "IMAP Holdings"))[0] == 404


@pytest.fixture
def client():
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Model Tracker API", "version": __version__, "status": "running"}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_unhandled_exception_is_a_500(client):
    service = MagicMock()
    service.get_unique_accounts = AsyncMock(side_effect=RuntimeError("boom"))
    app.dependency_overrides[get_account_service] = lambda: service

    response = client.get("/api/accounts")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == INTERNAL_ERROR
    assert data["message"] == "boom"
    assert data["retryable"] is False
    assert data["path"] == "/api/accounts"
