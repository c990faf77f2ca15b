"""Portfolio analysis feeding the daily commentary.

Collects totals, rankings and day-over-day movements for the held models.
The vendor email carries no security prices, so per-security moves are an
estimate derived from allocation changes and are named accordingly.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Literal

from model_tracker.config import settings
from model_tracker.services.analysis.model_watch_list_service import WatchListModel
from model_tracker.services.email_parsing.holdings_text import extract_allocations
from model_tracker.services.portfolio.portfolio_types import CombinedAccountPortfolio, ModelData
from model_tracker.services.trading_calendar_service import TradingCalendarService, market_today

logger = logging.getLogger(__name__)

Significance = Literal["high", "medium", "low"]
SIGNIFICANCE_ORDER = {"high": 3, "medium": 2, "low": 1}

MODEL_MOVE_THRESHOLD = 3.0
SECURITY_MOVE_THRESHOLD = 5.0
ALLOCATION_CHANGE_FACTOR = 2.0
MODEL_CORRELATION_FACTOR = 0.3
UNDERPERFORMANCE_RATIO = 0.9
UNDERPERFORMANCE_MIN_GAP = 5.0


@dataclass
class HeldModel:
    """A held model with the account and currency it sits in."""

    model: ModelData
    account_name: str
    currency: str


@dataclass
class SignificantMove:
    model_name: str
    account_name: str
    price_change: float
    value_change: float
    significance: Significance


@dataclass
class DailyModelMove:
    model_name: str
    account_name: str
    daily_change: float
    significance: Significance


@dataclass
class DailySecurityMove:
    """Estimated security move; not a real price change."""

    security_symbol: str
    estimated_daily_change: float
    model_name: str
    account_name: str
    significance: Significance


@dataclass
class UnderperformingModel:
    model_name: str
    account_name: str
    return_12_month: float
    return_ytd: float
    performance_gap: float


@dataclass
class PerformerSummary:
    name: str
    return_12_month: float


@dataclass
class PortfolioAnalysisData:
    total_value: float
    total_models: int
    current_date: str
    comparison_date: str
    model_performance_data: str
    top5_performers: list[WatchListModel]
    top5_not_owned: list[WatchListModel]
    significant_moves: list[SignificantMove]
    daily_model_moves: list[DailyModelMove]
    daily_security_moves: list[DailySecurityMove]
    underperforming_models: list[UnderperformingModel]
    best_performer_12mo: PerformerSummary | None
    worst_performer_12mo: PerformerSummary | None


def extract_held_models(accounts: list[CombinedAccountPortfolio]) -> list[HeldModel]:
    return [
        HeldModel(model=model, account_name=account.base_account_name, currency=currency.currency)
        for account in accounts
        for currency in account.currencies
        for model in currency.models
    ]


def model_performance_summary(models: list[HeldModel]) -> str:
    lines = []
    for held in models:
        perf = held.model.performance
        lines.append(
            f"{held.model.name} ({held.account_name}): YTD: {perf.return_ytd:.1f}%, "
            f"12Mo: {perf.return_12_month:.1f}%, Value: ${perf.final_equity:,.2f}"
        )
    return "\n".join(lines)


def _ranking(significance: Significance, magnitude: float) -> tuple[int, float]:
    return SIGNIFICANCE_ORDER[significance], abs(magnitude)


def find_significant_moves(models: list[HeldModel], total_value: float) -> list[SignificantMove]:
    """Models with large YTD returns or a large share of total value."""
    moves = []
    for held in models:
        perf = held.model.performance
        price_change = abs(perf.return_ytd)
        portfolio_share = abs(perf.final_equity) / total_value * 100 if total_value else 0.0

        if price_change > 15 or portfolio_share > 5:
            significance = "high"
        elif price_change > 10 or portfolio_share > 3:
            significance = "medium"
        elif price_change > 5 or portfolio_share > 1:
            significance = "low"
        else:
            continue

        moves.append(
            SignificantMove(
                model_name=held.model.name,
                account_name=held.account_name,
                price_change=price_change,
                value_change=portfolio_share,
                significance=significance,
            )
        )
    return sorted(moves, key=lambda m: _ranking(m.significance, m.price_change), reverse=True)


def model_move_significance(daily_change: float) -> Significance:
    if abs(daily_change) >= 10:
        return "high"
    if abs(daily_change) >= 5:
        return "medium"
    return "low"


def security_move_significance(estimated_change: float) -> Significance:
    if abs(estimated_change) >= 10:
        return "high"
    if abs(estimated_change) >= 7:
        return "medium"
    return "low"


def estimate_security_change(allocation_delta: float, model_daily_change: float) -> float:
    """Heuristic security move from its allocation delta, nudged by the model's own move."""
    estimate = allocation_delta * ALLOCATION_CHANGE_FACTOR
    if abs(model_daily_change) > 1:
        estimate += model_daily_change * MODEL_CORRELATION_FACTOR
    return estimate


def find_daily_movements(
    today_accounts: list[CombinedAccountPortfolio],
    previous_accounts: list[CombinedAccountPortfolio],
) -> tuple[list[DailyModelMove], list[DailySecurityMove]]:
    """Compare the same model in the same account and currency across two days."""
    model_moves: list[DailyModelMove] = []
    security_moves: list[DailySecurityMove] = []
    previous_by_name = {account.base_account_name: account for account in previous_accounts}

    for account in today_accounts:
        previous_account = previous_by_name.get(account.base_account_name)
        if previous_account is None:
            continue

        for currency in account.currencies:
            previous_currency = next(
                (c for c in previous_account.currencies if c.currency == currency.currency), None
            )
            if previous_currency is None:
                continue

            for model in currency.models:
                previous_model = next((m for m in previous_currency.models if m.name == model.name), None)
                if previous_model is None:
                    continue

                today_value = model.performance.final_equity
                previous_value = previous_model.performance.final_equity
                daily_change = 0.0
                if previous_value > 0:
                    daily_change = (today_value - previous_value) / previous_value * 100
                    if abs(daily_change) >= MODEL_MOVE_THRESHOLD:
                        model_moves.append(
                            DailyModelMove(
                                model_name=model.name,
                                account_name=account.base_account_name,
                                daily_change=daily_change,
                                significance=model_move_significance(daily_change),
                            )
                        )

                previous_weights = {
                    a.symbol: a.percentage
                    for a in extract_allocations(previous_model.performance.portfolio)
                }
                for allocation in extract_allocations(model.performance.portfolio):
                    previous_weight = previous_weights.get(allocation.symbol, 0)
                    if previous_weight <= 0:
                        continue
                    estimate = estimate_security_change(
                        allocation.percentage - previous_weight, daily_change
                    )
                    if abs(estimate) >= SECURITY_MOVE_THRESHOLD:
                        security_moves.append(
                            DailySecurityMove(
                                security_symbol=allocation.symbol,
                                estimated_daily_change=estimate,
                                model_name=model.name,
                                account_name=account.base_account_name,
                                significance=security_move_significance(estimate),
                            )
                        )

    model_moves.sort(key=lambda m: _ranking(m.significance, m.daily_change), reverse=True)
    security_moves.sort(
        key=lambda m: _ranking(m.significance, m.estimated_daily_change), reverse=True
    )
    return model_moves, security_moves


def find_underperforming_models(
    models: list[HeldModel], top_performers: list[WatchListModel]
) -> list[UnderperformingModel]:
    """Held models trailing the top-five average by more than 10% and 5 points."""
    if not top_performers:
        return []

    top_average = sum(model.return_12_month for model in top_performers) / len(top_performers)
    threshold = top_average * UNDERPERFORMANCE_RATIO

    underperformers = []
    for held in models:
        perf = held.model.performance
        if not perf.return_12_month:
            continue
        gap = top_average - perf.return_12_month
        if perf.return_12_month < threshold and gap > UNDERPERFORMANCE_MIN_GAP:
            underperformers.append(
                UnderperformingModel(
                    model_name=held.model.name,
                    account_name=held.account_name,
                    return_12_month=perf.return_12_month,
                    return_ytd=perf.return_ytd,
                    performance_gap=gap,
                )
            )
    return sorted(underperformers, key=lambda model: model.performance_gap, reverse=True)


def find_best_and_worst(models: list[HeldModel]) -> tuple[PerformerSummary | None, PerformerSummary | None]:
    if not models:
        return None, None
    ranked = sorted(models, key=lambda held: held.model.performance.return_12_month, reverse=True)
    best, worst = ranked[0].model, ranked[-1].model
    return (
        PerformerSummary(best.name, best.performance.return_12_month),
        PerformerSummary(worst.name, worst.performance.return_12_month),
    )


class PortfolioAnalysisService:
    """Assembles PortfolioAnalysisData for a date."""

    def __init__(self, combined_account_service, watch_list_service) -> None:
        self.combined_account_service = combined_account_service
        self.watch_list_service = watch_list_service

    async def generate_analysis_data(self, target_date: date | None = None) -> PortfolioAnalysisData:
        target_date = target_date or market_today(settings.market_timezone)
        previous_date = TradingCalendarService.get_previous_trading_day(target_date)
        logger.info(f"Generating portfolio analysis for {target_date} against {previous_date}")

        accounts = await self.combined_account_service.get_combined_account_portfolios(target_date)
        watch_list = await self.watch_list_service.get_model_watch_list(target_date)
        previous_accounts = await self.combined_account_service.get_combined_account_portfolios(
            previous_date
        )

        total_value = sum(account.total_value_all_currencies for account in accounts)
        held_models = extract_held_models(accounts)
        model_moves, security_moves = find_daily_movements(accounts, previous_accounts)
        best, worst = find_best_and_worst(held_models)

        logger.info(
            f"Analysis for {target_date}: {len(held_models)} models, "
            f"{len(model_moves)} model moves, {len(security_moves)} estimated security moves"
        )

        return PortfolioAnalysisData(
            total_value=total_value,
            total_models=len(held_models),
            current_date=target_date.isoformat(),
            comparison_date=previous_date.isoformat(),
            model_performance_data=model_performance_summary(held_models),
            top5_performers=watch_list.top_performers,
            top5_not_owned=[model for model in watch_list.top_performers if not model.is_owned],
            significant_moves=find_significant_moves(held_models, total_value),
            daily_model_moves=model_moves,
            daily_security_moves=security_moves,
            underperforming_models=find_underperforming_models(held_models, watch_list.top_performers),
            best_performer_12mo=best,
            worst_performer_12mo=worst,
        )
