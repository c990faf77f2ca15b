"""Shared test fixtures and builders."""

from pathlib import Path

import pytest

from model_tracker.services.analysis.model_watch_list_service import WatchListModel
from model_tracker.services.analysis.portfolio_analysis_service import (
    DailyModelMove,
    PerformerSummary,
    PortfolioAnalysisData,
)
from model_tracker.services.email_parsing.types import Holding, PerformanceData, RawEmail
from model_tracker.services.portfolio.portfolio_types import (
    AccountPortfolio,
    ChangeAlert,
    CombinedAccountPortfolio,
    CurrencyPortfolio,
    ModelAccountMapping,
    ModelData,
    PortfolioChange,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def make_model(
    name: str,
    portfolio: str = "",
    final_equity: float = 100_000.0,
    return_12_month: float = 20.0,
    return_ytd: float = 10.0,
) -> ModelData:
    return ModelData(
        name=name,
        symbol=name,
        performance=PerformanceData(
            final_equity=final_equity,
            return_12_month=return_12_month,
            return_ytd=return_ytd,
            portfolio=portfolio,
        ),
    )


def make_account(account_name: str, models: list[ModelData], day: str = "2025-06-02") -> AccountPortfolio:
    return AccountPortfolio(
        account_name=account_name,
        models=models,
        total_value=sum(model.performance.final_equity for model in models),
        date=day,
    )


def make_combined(
    base_account_name: str,
    models: list[ModelData],
    currency: str = "USD",
    day: str = "2025-06-02",
) -> CombinedAccountPortfolio:
    total = sum(model.performance.final_equity for model in models)
    return CombinedAccountPortfolio(
        base_account_name=base_account_name,
        currencies=[CurrencyPortfolio(currency=currency, models=models, total_value=total)],
        total_value_all_currencies=total,
        date=day,
    )


def make_holding(name: str, portfolio: str = "", return_12_month: float = 20.0, final_equity: float = 100_000.0):
    performance = PerformanceData(
        final_equity=final_equity,
        return_12_month=return_12_month,
        portfolio=portfolio,
    )
    return Holding(
        symbol=name,
        name=name,
        quantity=1,
        price=final_equity,
        value=final_equity,
        performance=performance,
    )


@pytest.fixture
def performance_email_html() -> str:
    return load_fixture("performance_email.html")


@pytest.fixture
def holdings_email_html() -> str:
    return load_fixture("holdings_email.html")


@pytest.fixture
def performance_email(performance_email_html) -> RawEmail:
    return RawEmail(
        id="imap-1",
        subject="StockApp Systems Daily Summary 2025-06-02",
        sender="Shaun McQuaker <reports@stockapp.example>",
        date="Mon, 02 Jun 2025 17:30:00 -0400",
        html_body=performance_email_html,
    )


@pytest.fixture
def mappings() -> list[ModelAccountMapping]:
    return [
        ModelAccountMapping(model="Glen S&P 100", account="Glen RRSP $USD"),
        ModelAccountMapping(model="Glen S&P 100", account="Glen TFSA"),
        ModelAccountMapping(model="Tech Momentum", account="Glen RRSP $CAD"),
    ]


def make_watch_list_model(name: str, return_12_month: float, is_owned: bool = False) -> WatchListModel:
    return WatchListModel(
        name=name,
        symbol=name,
        return_12_month=return_12_month,
        return_ytd=0.0,
        final_equity=100_000.0,
        sharpe_ratio=1.0,
        max_drawdown=-5.0,
        portfolio="",
        is_owned=is_owned,
    )


def make_analysis(**overrides) -> PortfolioAnalysisData:
    values = dict(
        total_value=250_000.0,
        total_models=2,
        current_date="2025-06-02",
        comparison_date="2025-05-30",
        model_performance_data="Alpha (Glen RRSP): $150000.00, YTD 10.0%, 12Mo 20.0%",
        top5_performers=[make_watch_list_model("Alpha", 20.0, is_owned=True), make_watch_list_model("Other", 40.0)],
        top5_not_owned=[make_watch_list_model("Other", 40.0)],
        significant_moves=[],
        daily_model_moves=[
            DailyModelMove(model_name="Alpha", account_name="Glen RRSP", daily_change=4.2, significance="low")
        ],
        daily_security_moves=[],
        underperforming_models=[],
        best_performer_12mo=PerformerSummary(name="Alpha", return_12_month=20.0),
        worst_performer_12mo=PerformerSummary(name="Beta", return_12_month=-3.5),
    )
    values.update(overrides)
    return PortfolioAnalysisData(**values)


def make_alert(changes: list[PortfolioChange] | None = None, day: str = "2025-06-02") -> ChangeAlert:
    changes = (
        [
            PortfolioChange(
                model_name="Glen S&P 100",
                account_name="Glen TFSA",
                added_holdings=["AVGO"],
                removed_holdings=["AAPL"],
                date=day,
            ),
            PortfolioChange(
                model_name="Tech Momentum",
                account_name="Glen RRSP",
                added_holdings=["TSLA"],
                removed_holdings=[],
                date=day,
            ),
        ]
        if changes is None
        else changes
    )
    accounts = sorted({change.account_name for change in changes})
    return ChangeAlert(
        has_changes=bool(changes),
        changes=changes,
        total_changes=len(changes),
        affected_accounts=accounts,
        date=day,
        comparison_date="2025-05-30",
        message=f"Found {len(changes)} models with changes",
    )
