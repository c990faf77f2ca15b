"""Combined (multi-currency) accounts API router."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from model_tracker.config import settings
from model_tracker.dependencies import get_combined_account_service
from model_tracker.schemas.portfolio import (
    AccountChanges,
    CombinedAccountPortfolio,
    CombinedAccountsResponse,
    CombinedAccountSummary,
    CurrencySummary,
)
from model_tracker.services.portfolio import CombinedAccountService
from model_tracker.services.portfolio.portfolio_types import (
    CombinedAccountPortfolio as CombinedAccountData,
)
from model_tracker.services.trading_calendar_service import market_today

router = APIRouter(prefix="/api/combined-accounts", tags=["combined-accounts"])


def to_summary(account: CombinedAccountData) -> CombinedAccountSummary:
    """Combined account without per-model detail."""
    return CombinedAccountSummary(
        base_account_name=account.base_account_name,
        total_value_all_currencies=account.total_value_all_currencies,
        currencies=[
            CurrencySummary(
                currency=currency.currency,
                total_value=currency.total_value,
                model_count=len(currency.models),
            )
            for currency in account.currencies
        ],
        model_count=sum(len(currency.models) for currency in account.currencies),
        date=account.date,
        changes=AccountChanges.model_validate(account.changes) if account.changes else None,
    )


@router.get("", response_model=CombinedAccountsResponse)
async def list_combined_accounts(
    target_date: date | None = Query(None, alias="date", description="Date to assemble (YYYY-MM-DD)"),
    service: CombinedAccountService = Depends(get_combined_account_service),
):
    """
    Summaries of every combined account for a date.

    Returns:
        Account summaries with per-currency totals and the day's changes
    """
    target_date = target_date or market_today(settings.market_timezone)
    accounts = await service.get_combined_account_portfolios(target_date)
    return CombinedAccountsResponse(
        accounts=[to_summary(account) for account in accounts],
        total_accounts=len(accounts),
        total_value=sum(account.total_value_all_currencies for account in accounts),
        date=target_date.isoformat(),
    )


@router.get("/{base_account_name}", response_model=CombinedAccountPortfolio)
async def get_combined_account(
    base_account_name: str,
    target_date: date | None = Query(None, alias="date", description="Date to assemble (YYYY-MM-DD)"),
    service: CombinedAccountService = Depends(get_combined_account_service),
):
    """Full combined account, 404 when no account has this base name."""
    return await service.get_combined_account_by_name(base_account_name, target_date)
