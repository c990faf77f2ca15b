"""Tests for the combined accounts router."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from model_tracker.dependencies import get_combined_account_service
from model_tracker.main import app
from model_tracker.services.exceptions import NotFoundError
from model_tracker.services.portfolio import AccountChanges
from tests.conftest import make_combined, make_model


@pytest.fixture
def accounts():
    rrsp = make_combined(
        "Glen RRSP",
        [make_model("Alpha", final_equity=150_000.0), make_model("Beta", final_equity=50_000.0)],
    )
    rrsp.changes = AccountChanges(added_holdings=["AVGO"], removed_holdings=[], has_changes=True)
    tfsa = make_combined("Glen TFSA", [make_model("Gamma")], currency="CAD")
    return [rrsp, tfsa]


@pytest.fixture
def service(accounts):
    mock_service = MagicMock()
    mock_service.get_combined_account_portfolios = AsyncMock(return_value=accounts)
    mock_service.get_combined_account_by_name = AsyncMock(return_value=accounts[0])
    return mock_service


@pytest.fixture
def client(service):
    app.dependency_overrides[get_combined_account_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_combined_accounts(client):
    response = client.get("/api/combined-accounts", params={"date": "2025-06-02"})

    assert response.status_code == 200
    data = response.json()
    assert data["totalAccounts"] == 2
    assert data["totalValue"] == 300_000.0
    assert data["date"] == "2025-06-02"

    rrsp = data["accounts"][0]
    assert rrsp["baseAccountName"] == "Glen RRSP"
    assert rrsp["totalValueAllCurrencies"] == 200_000.0
    assert rrsp["modelCount"] == 2
    assert rrsp["currencies"] == [{"currency": "USD", "totalValue": 200_000.0, "modelCount": 2}]
    assert rrsp["changes"] == {"addedHoldings": ["AVGO"], "removedHoldings": [], "hasChanges": True}
    assert data["accounts"][1]["changes"] is None


def test_get_combined_account(client, service):
    response = client.get("/api/combined-accounts/Glen RRSP", params={"date": "2025-06-02"})

    assert response.status_code == 200
    data = response.json()
    assert data["baseAccountName"] == "Glen RRSP"
    performance = data["currencies"][0]["models"][0]["performance"]
    assert performance["returnYTD"] == 10.0
    assert performance["return12Month"] == 20.0
    assert performance["finalEquity"] == 150_000.0
    assert service.get_combined_account_by_name.call_args.args[0] == "Glen RRSP"


def test_unknown_account_is_404(client, service):
    service.get_combined_account_by_name.side_effect = NotFoundError("Account", "Nope")

    response = client.get("/api/combined-accounts/Nope")

    assert response.status_code == 404
    assert response.json()["message"] == "Account not found: Nope"
    assert response.json()["retryable"] is False
