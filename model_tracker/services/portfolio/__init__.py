"""Account assembly: mapping parsed models to accounts and combining currencies."""

from .account_portfolio_service import AccountPortfolioService
from .combined_account_service import (
    CombinedAccountService,
    extract_base_account_name,
    extract_currency,
)
from .portfolio_types import (
    AccountChanges,
    AccountPortfolio,
    ChangeAlert,
    CombinedAccountPortfolio,
    CurrencyPortfolio,
    ModelAccountMapping,
    ModelData,
    PortfolioChange,
)

__all__ = [
    "AccountChanges",
    "AccountPortfolio",
    "AccountPortfolioService",
    "ChangeAlert",
    "CombinedAccountPortfolio",
    "CombinedAccountService",
    "CurrencyPortfolio",
    "ModelAccountMapping",
    "ModelData",
    "PortfolioChange",
    "extract_base_account_name",
    "extract_currency",
]
