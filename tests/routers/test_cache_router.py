"""Tests for the cache administration router."""

import pytest
from fastapi.testclient import TestClient

from model_tracker.dependencies import get_cache
from model_tracker.main import app
from model_tracker.services.cache_service import CacheService


@pytest.fixture
def cache():
    cache = CacheService()
    cache.set_combined_accounts("2025-06-02", [])
    cache.set_model_watch_list("2025-06-02", {})
    return cache


@pytest.fixture
def client(cache):
    app.dependency_overrides[get_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_stats(client):
    response = client.get("/api/cache/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["size"] == 2
    assert sorted(data["keys"]) == ["combined-accounts-2025-06-02", "model-watch-list-2025-06-02"]


def test_clear_single_key(client, cache):
    response = client.post("/api/cache/clear", params={"key": "combined-accounts-2025-06-02"})

    assert response.status_code == 200
    assert response.json()["message"] == "Cache cleared for combined-accounts-2025-06-02"
    assert "clearedAt" in response.json()
    assert cache.stats()["keys"] == ["model-watch-list-2025-06-02"]


def test_clear_all(client, cache):
    response = client.post("/api/cache/clear")

    assert response.json()["message"] == "Cache cleared successfully"
    assert cache.stats() == {"size": 0, "keys": []}
