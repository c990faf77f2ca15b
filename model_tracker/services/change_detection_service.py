"""Day-over-day change detection for model holdings.

Compares each model's holdings string against the same model on the previous
trading day. Only the set of symbols is compared, so a model whose weights
were rebalanced ("NVDA (22%)" -> "NVDA (17%)") reports no change; a symbol
that appears or disappears is reported with its full "SYMBOL (NN%)" text.
"""

import asyncio
import logging
from datetime import date

from model_tracker.config import settings
from model_tracker.services.email_parsing.holdings_text import extract_symbols, holdings_by_symbol
from model_tracker.services.portfolio.portfolio_types import (
    AccountPortfolio,
    ChangeAlert,
    ModelData,
    PortfolioChange,
)
from model_tracker.services.trading_calendar_service import TradingCalendarService, market_today

logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No portfolio changes detected"


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def compare_model_holdings(
    today_portfolio: str,
    previous_portfolio: str,
) -> tuple[list[str], list[str]]:
    """
    Diff two holdings strings by symbol.

    Returns:
        (added, removed) full holding strings; added use today's weights,
        removed use the previous day's
    """
    today_symbols = extract_symbols(today_portfolio)
    previous_symbols = extract_symbols(previous_portfolio)
    today_lookup = holdings_by_symbol(today_portfolio)
    previous_lookup = holdings_by_symbol(previous_portfolio)

    today_set = set(today_symbols)
    previous_set = set(previous_symbols)

    removed = [previous_lookup[symbol] for symbol in previous_symbols if symbol not in today_set]
    added = [today_lookup[symbol] for symbol in today_symbols if symbol not in previous_set]
    return _unique(added), _unique(removed)


def _find_model(models: list[ModelData], name: str) -> ModelData | None:
    return next((model for model in models if model.name == name), None)


def compare_portfolios(
    today_portfolios: list[AccountPortfolio],
    previous_portfolios: list[AccountPortfolio],
    day: str,
) -> list[PortfolioChange]:
    """Changes for every account present today, sorted by account then model."""
    previous_by_account = {portfolio.account_name: portfolio for portfolio in previous_portfolios}
    changes: list[PortfolioChange] = []

    for account in today_portfolios:
        previous_account = previous_by_account.get(account.account_name)
        previous_models = previous_account.models if previous_account else []

        for model in account.models:
            previous_model = _find_model(previous_models, model.name)
            previous_text = previous_model.performance.portfolio if previous_model else ""
            added, removed = compare_model_holdings(model.performance.portfolio, previous_text)
            change = PortfolioChange(
                model_name=model.name,
                account_name=account.account_name,
                added_holdings=added,
                removed_holdings=removed,
                date=day,
            )
            if change.has_changes:
                changes.append(change)

        # Models dropped from the account since the previous day
        for previous_model in previous_models:
            if _find_model(account.models, previous_model.name) is not None:
                continue
            _, removed = compare_model_holdings("", previous_model.performance.portfolio)
            change = PortfolioChange(
                model_name=previous_model.name,
                account_name=account.account_name,
                added_holdings=[],
                removed_holdings=removed,
                date=day,
            )
            if change.has_changes:
                changes.append(change)

    return sorted(changes, key=lambda change: (change.account_name, change.model_name))


def summarize_changes(changes: list[PortfolioChange], affected_accounts: list[str]) -> str:
    if not changes:
        return NO_CHANGES_MESSAGE
    added = sum(len(change.added_holdings) for change in changes)
    removed = sum(len(change.removed_holdings) for change in changes)
    return (
        f"{len(changes)} model change(s) across {len(affected_accounts)} account(s): "
        f"{added} added, {removed} removed"
    )


class ChangeDetectionService:
    """Detects holdings changes between a trading day and the previous trading day.

    Args:
        account_service: AccountPortfolioService used to assemble both days
        stagger_seconds: Delay before the previous-day fetch starts
    """

    def __init__(self, account_service, stagger_seconds: float | None = None) -> None:
        self.account_service = account_service
        self.stagger_seconds = (
            settings.imap_fetch_stagger_seconds if stagger_seconds is None else stagger_seconds
        )

    async def _fetch_previous(self, previous: date) -> list[AccountPortfolio]:
        if self.stagger_seconds > 0:
            await asyncio.sleep(self.stagger_seconds)
        return await self.account_service.get_account_portfolios(previous)

    async def _fetch_today(
        self, today: date, today_portfolios: list[AccountPortfolio] | None
    ) -> list[AccountPortfolio]:
        if today_portfolios is not None:
            return today_portfolios
        return await self.account_service.get_account_portfolios(today)

    async def detect_changes(
        self,
        today: date | None = None,
        today_portfolios: list[AccountPortfolio] | None = None,
    ) -> ChangeAlert:
        """
        Build the change alert for a date.

        Non-trading days return an empty alert without fetching anything.

        Args:
            today: Date to check, today's market date by default
            today_portfolios: Portfolios already assembled for `today`; only
                the previous trading day is fetched when given

        Returns:
            ChangeAlert comparing against the previous trading day
        """
        today = today or market_today(settings.market_timezone)
        day = today.isoformat()

        if not TradingCalendarService.is_trading_day(today):
            reason = TradingCalendarService.get_no_change_reason(today)
            logger.info(f"Skipping change detection for {day}: {reason}")
            return ChangeAlert(
                has_changes=False,
                changes=[],
                total_changes=0,
                affected_accounts=[],
                date=day,
                comparison_date=None,
                message=reason,
            )

        previous = TradingCalendarService.get_previous_trading_day(today)
        logger.info(f"Detecting changes between {previous.isoformat()} and {day}")

        today_portfolios, previous_portfolios = await asyncio.gather(
            self._fetch_today(today, today_portfolios),
            self._fetch_previous(previous),
        )
        logger.info(
            f"Today: {len(today_portfolios)} accounts, previous: {len(previous_portfolios)} accounts"
        )

        changes = compare_portfolios(today_portfolios, previous_portfolios, day)
        affected_accounts = sorted({change.account_name for change in changes})
        message = summarize_changes(changes, affected_accounts)
        logger.info(f"Change detection complete for {day}: {message}")

        return ChangeAlert(
            has_changes=bool(changes),
            changes=changes,
            total_changes=len(changes),
            affected_accounts=affected_accounts,
            date=day,
            comparison_date=previous.isoformat(),
            message=message,
        )
