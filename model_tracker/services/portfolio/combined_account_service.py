"""Currency-combined account views.

Accounts named "<base> $USD" and "<base> $CAD" are reported together under
their base name, each currency keeping its own models and total. Each base
account carries the day's added/removed holdings from change detection.
"""

import logging
import re
from datetime import date

from model_tracker.config import settings
from model_tracker.services.cache_service import CacheService
from model_tracker.services.exceptions import NotFoundError
from model_tracker.services.portfolio.portfolio_types import (
    AccountChanges,
    AccountPortfolio,
    CombinedAccountPortfolio,
    Currency,
    CurrencyPortfolio,
    PortfolioChange,
)
from model_tracker.services.trading_calendar_service import market_today

logger = logging.getLogger(__name__)

CURRENCY_SUFFIX = re.compile(r"\s+\$(?:USD|CAD)$", re.IGNORECASE)
CURRENCY_CODE = re.compile(r"\$(USD|CAD)$", re.IGNORECASE)
DEFAULT_CURRENCY: Currency = "USD"


def extract_base_account_name(account_name: str) -> str:
    """'Glen RRSP $USD' -> 'Glen RRSP'."""
    return CURRENCY_SUFFIX.sub("", account_name)


def extract_currency(account_name: str) -> Currency:
    """'Glen RRSP $CAD' -> 'CAD'; names without a suffix are USD."""
    match = CURRENCY_CODE.search(account_name)
    if match:
        return match.group(1).upper()
    return DEFAULT_CURRENCY


def group_accounts_by_currency(portfolios: list[AccountPortfolio]) -> list[CombinedAccountPortfolio]:
    grouped: dict[str, CombinedAccountPortfolio] = {}

    for portfolio in portfolios:
        base_name = extract_base_account_name(portfolio.account_name)
        combined = grouped.get(base_name)
        if combined is None:
            combined = CombinedAccountPortfolio(
                base_account_name=base_name,
                currencies=[],
                total_value_all_currencies=0.0,
                date=portfolio.date,
            )
            grouped[base_name] = combined

        combined.currencies.append(
            CurrencyPortfolio(
                currency=extract_currency(portfolio.account_name),
                models=portfolio.models,
                total_value=portfolio.total_value,
            )
        )
        combined.total_value_all_currencies += portfolio.total_value

    return list(grouped.values())


def attach_changes(
    combined_accounts: list[CombinedAccountPortfolio],
    changes: list[PortfolioChange],
) -> None:
    """Set each account's changes block from the changes of its currency accounts."""
    for combined in combined_accounts:
        account_changes = [
            change
            for change in changes
            if extract_base_account_name(change.account_name) == combined.base_account_name
        ]
        added = list(dict.fromkeys(h for change in account_changes for h in change.added_holdings))
        removed = list(dict.fromkeys(h for change in account_changes for h in change.removed_holdings))
        combined.changes = AccountChanges(
            added_holdings=added,
            removed_holdings=removed,
            has_changes=bool(added or removed),
        )


class CombinedAccountService:
    """Builds and caches the combined account views for a date."""

    def __init__(self, account_service, change_detection_service, cache: CacheService) -> None:
        self.account_service = account_service
        self.change_detection_service = change_detection_service
        self.cache = cache

    async def get_combined_account_portfolios(
        self, target_date: date | None = None
    ) -> list[CombinedAccountPortfolio]:
        """
        Combined accounts for a date, served from cache when fresh.

        Args:
            target_date: Date to assemble, today's market date by default

        Returns:
            CombinedAccountPortfolio list sorted by base account name
        """
        target_date = target_date or market_today(settings.market_timezone)
        day = target_date.isoformat()

        cached = self.cache.get_combined_accounts(day)
        if cached is not None:
            logger.info(f"Returning cached combined accounts for {day}")
            return cached

        portfolios = await self.account_service.get_account_portfolios(target_date)
        alert = await self.change_detection_service.detect_changes(target_date, today_portfolios=portfolios)

        combined = group_accounts_by_currency(portfolios)
        attach_changes(combined, alert.changes)
        combined.sort(key=lambda account: account.base_account_name)

        self.cache.set_combined_accounts(day, combined)
        logger.info(f"Created and cached {len(combined)} combined account portfolios for {day}")
        return combined

    async def get_combined_account_by_name(
        self, base_account_name: str, target_date: date | None = None
    ) -> CombinedAccountPortfolio:
        """
        Raises:
            NotFoundError: If no combined account has this base name
        """
        for account in await self.get_combined_account_portfolios(target_date):
            if account.base_account_name == base_account_name:
                return account
        raise NotFoundError("Account", base_account_name)

    async def get_combined_account_names(self, target_date: date | None = None) -> list[str]:
        accounts = await self.get_combined_account_portfolios(target_date)
        return [account.base_account_name for account in accounts]
