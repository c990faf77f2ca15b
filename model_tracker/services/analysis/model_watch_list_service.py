"""Top-performing model watch list.

Ranks every model in the day's emails (not only the mapped ones) by 12-month
return and marks which of the top five are already held.
"""

import logging
from dataclasses import dataclass
from datetime import date

from model_tracker.config import settings
from model_tracker.services.cache_service import CacheService
from model_tracker.services.email_parsing import Holding
from model_tracker.services.model_matching import models_match
from model_tracker.services.portfolio.portfolio_types import CombinedAccountPortfolio
from model_tracker.services.trading_calendar_service import market_today

logger = logging.getLogger(__name__)

TOP_PERFORMER_COUNT = 5


@dataclass
class WatchListModel:
    name: str
    symbol: str
    return_12_month: float
    return_ytd: float
    final_equity: float
    sharpe_ratio: float
    max_drawdown: float
    portfolio: str
    is_owned: bool


@dataclass
class ModelWatchList:
    top_performers: list[WatchListModel]
    total_models_analyzed: int
    owned_models_count: int
    opportunity_models_count: int
    date: str


def owned_model_names(combined_accounts: list[CombinedAccountPortfolio]) -> list[str]:
    names = (
        model.name
        for account in combined_accounts
        for currency in account.currencies
        for model in currency.models
    )
    return list(dict.fromkeys(names))


def to_watch_list_models(holdings: list[Holding], owned_names: list[str]) -> list[WatchListModel]:
    """Models with performance data, deduplicated by lower-cased name."""
    unique: dict[str, WatchListModel] = {}

    for holding in holdings:
        performance = holding.performance
        if performance is None:
            continue

        model = WatchListModel(
            name=holding.name,
            symbol=holding.symbol,
            return_12_month=performance.return_12_month,
            return_ytd=performance.return_ytd,
            final_equity=performance.final_equity,
            sharpe_ratio=performance.sharpe_ratio,
            max_drawdown=performance.max_drawdown,
            portfolio=performance.portfolio,
            is_owned=any(models_match(holding.name, owned) for owned in owned_names),
        )

        key = holding.name.lower()
        existing = unique.get(key)
        if existing is None or (model.return_12_month, model.final_equity) > (
            existing.return_12_month,
            existing.final_equity,
        ):
            unique[key] = model

    return list(unique.values())


def rank_models(models: list[WatchListModel], limit: int = TOP_PERFORMER_COUNT) -> list[WatchListModel]:
    """Models with a 12-month return, best first."""
    ranked = [model for model in models if model.return_12_month != 0]
    ranked.sort(key=lambda model: model.return_12_month, reverse=True)
    return ranked[:limit]


class ModelWatchListService:
    """Builds and caches the model watch list for a date."""

    def __init__(self, account_service, combined_account_service, cache: CacheService) -> None:
        self.account_service = account_service
        self.combined_account_service = combined_account_service
        self.cache = cache

    async def get_model_watch_list(self, target_date: date | None = None) -> ModelWatchList:
        target_date = target_date or market_today(settings.market_timezone)
        day = target_date.isoformat()

        cached = self.cache.get_model_watch_list(day)
        if cached is not None:
            logger.info(f"Returning cached model watch list for {day}")
            return cached

        holdings = await self.account_service.fetch_email_holdings(target_date, [])
        combined_accounts = await self.combined_account_service.get_combined_account_portfolios(target_date)
        owned_names = owned_model_names(combined_accounts)
        logger.info(f"Found {len(holdings)} models in email, {len(owned_names)} held")

        models = to_watch_list_models(holdings, owned_names)
        top_performers = rank_models(models)
        owned_count = sum(1 for model in models if model.is_owned)

        for rank, model in enumerate(top_performers, start=1):
            status = "owned" if model.is_owned else "opportunity"
            logger.debug(f"{rank}. {model.name}: {model.return_12_month}% ({status})")

        watch_list = ModelWatchList(
            top_performers=top_performers,
            total_models_analyzed=len(models),
            owned_models_count=owned_count,
            opportunity_models_count=len(models) - owned_count,
            date=day,
        )
        self.cache.set_model_watch_list(day, watch_list)
        return watch_list
