"""Value objects for account assembly and change detection."""

from dataclasses import dataclass, field
from typing import Literal

from model_tracker.services.email_parsing.types import PerformanceData

Currency = Literal["USD", "CAD"]


@dataclass
class ModelAccountMapping:
    """One row of the mapping sheet: model in column A, account in column B."""

    model: str
    account: str


@dataclass
class ModelData:
    """A model as held in one account."""

    name: str
    symbol: str
    performance: PerformanceData


@dataclass
class AccountPortfolio:
    """Models mapped to one account on one date."""

    account_name: str
    models: list[ModelData]
    total_value: float
    date: str


@dataclass
class CurrencyPortfolio:
    currency: Currency
    models: list[ModelData]
    total_value: float


@dataclass
class AccountChanges:
    added_holdings: list[str] = field(default_factory=list)
    removed_holdings: list[str] = field(default_factory=list)
    has_changes: bool = False


@dataclass
class CombinedAccountPortfolio:
    """USD and CAD sides of one base account grouped together."""

    base_account_name: str
    currencies: list[CurrencyPortfolio]
    total_value_all_currencies: float
    date: str
    changes: AccountChanges | None = None


@dataclass
class PortfolioChange:
    """Securities added to or removed from one model in one account."""

    model_name: str
    account_name: str
    added_holdings: list[str]
    removed_holdings: list[str]
    date: str

    @property
    def has_changes(self) -> bool:
        return bool(self.added_holdings or self.removed_holdings)


@dataclass
class ChangeAlert:
    """Day-over-day change summary across all accounts."""

    has_changes: bool
    changes: list[PortfolioChange]
    total_changes: int
    affected_accounts: list[str]
    date: str
    comparison_date: str | None
    message: str
