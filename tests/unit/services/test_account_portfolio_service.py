"""Tests for account portfolio assembly."""

import asyncio
import logging
from datetime import date
from unittest.mock import MagicMock

import pytest

from model_tracker.services.portfolio import AccountPortfolioService
from model_tracker.services.portfolio.account_portfolio_service import group_by_account, to_model_data
from model_tracker.services.portfolio.portfolio_types import ModelAccountMapping
from tests.conftest import make_holding

DAY = date(2025, 6, 2)


@pytest.fixture
def mail_client(performance_email):
    client = MagicMock()
    client.get_portfolio_emails.return_value = [performance_email]
    return client


@pytest.fixture
def sheets_client(mappings):
    client = MagicMock()
    client.get_model_account_mappings.return_value = mappings
    return client


class TestGroupByAccount:
    def test_model_mapped_to_two_accounts_appears_in_both(self):
        holding = make_holding("1. Glen S&P 100", "NVDA (22%)", final_equity=1000.0)
        mappings = [
            ModelAccountMapping(model="Glen S&P 100", account="Glen RRSP"),
            ModelAccountMapping(model="Glen S&P 100", account="Glen TFSA"),
        ]

        portfolios = group_by_account([holding], mappings, "2025-06-02")

        assert [portfolio.account_name for portfolio in portfolios] == ["Glen RRSP", "Glen TFSA"]
        rrsp, tfsa = portfolios
        assert rrsp.models[0].performance == tfsa.models[0].performance
        assert rrsp.total_value == tfsa.total_value == 1000.0

    def test_fanned_out_models_are_independent_copies(self):
        holding = make_holding("Glen S&P 100", "NVDA (22%)")
        mappings = [
            ModelAccountMapping(model="Glen S&P 100", account="A"),
            ModelAccountMapping(model="Glen S&P 100", account="B"),
        ]

        first, second = group_by_account([holding], mappings, "2025-06-02")
        first.models[0].performance.portfolio = "changed"

        assert second.models[0].performance.portfolio == "NVDA (22%)"

    def test_unmapped_model_is_dropped(self):
        portfolios = group_by_account(
            [make_holding("Unrelated Fund")],
            [ModelAccountMapping(model="Glen S&P 100", account="Glen RRSP")],
            "2025-06-02",
        )
        assert portfolios == []

    def test_plain_holding_gets_minimal_performance(self):
        holding = make_holding("NVDA")
        holding.performance = None
        holding.value = 1200.0
        holding.day_change_percent = 2.0

        model = to_model_data(holding)

        assert model.performance.final_equity == 1200.0
        assert model.performance.return_ytd == 2.0


class TestAccountPortfolioService:
    def test_get_account_portfolios(self, mail_client, sheets_client):
        service = AccountPortfolioService(mail_client, sheets_client)

        portfolios = asyncio.run(service.get_account_portfolios(DAY))

        mail_client.get_portfolio_emails.assert_called_once_with(DAY, DAY)
        assert [portfolio.account_name for portfolio in portfolios] == [
            "Glen RRSP $CAD",
            "Glen RRSP $USD",
            "Glen TFSA",
        ]
        cad = portfolios[0]
        assert [model.symbol for model in cad.models] == ["Tech Momentum"]
        assert cad.date == "2025-06-02"

    def test_no_email_for_date(self, mail_client, sheets_client):
        mail_client.get_portfolio_emails.return_value = []
        service = AccountPortfolioService(mail_client, sheets_client)

        assert asyncio.run(service.get_account_portfolios(DAY)) == []

    def test_fetch_failure_propagates(self, mail_client, sheets_client):
        sheets_client.get_model_account_mappings.side_effect = RuntimeError("sheet unavailable")
        service = AccountPortfolioService(mail_client, sheets_client)

        with pytest.raises(RuntimeError, match="sheet unavailable"):
            asyncio.run(service.get_account_portfolios(DAY))

    def test_fetch_email_holdings_without_filter(self, mail_client, sheets_client):
        service = AccountPortfolioService(mail_client, sheets_client)

        holdings = asyncio.run(service.fetch_email_holdings(DAY, []))

        assert len(holdings) == 3
        sheets_client.get_model_account_mappings.assert_not_called()

    def test_parse_emails_merges_reports(self, mail_client, sheets_client, performance_email):
        service = AccountPortfolioService(mail_client, sheets_client)

        holdings, report = service.parse_emails([performance_email, performance_email], [])

        assert len(holdings) == 6
        assert report.parsed_count == 6
        assert report.skipped_count == 4
        assert report.malformed_count == 0

    def test_parse_report_is_logged_per_date(self, mail_client, sheets_client, caplog):
        service = AccountPortfolioService(mail_client, sheets_client)

        with caplog.at_level(logging.INFO, logger="model_tracker.services.portfolio.account_portfolio_service"):
            asyncio.run(service.fetch_email_holdings(DAY, []))

        assert "Parse report for 2025-06-02: 3 rows parsed, 2 tables skipped, 0 malformed" in caplog.text

    def test_get_unique_accounts(self, mail_client, sheets_client):
        service = AccountPortfolioService(mail_client, sheets_client)

        accounts = asyncio.run(service.get_unique_accounts())

        assert accounts == ["Glen RRSP $CAD", "Glen RRSP $USD", "Glen TFSA"]
