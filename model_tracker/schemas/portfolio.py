"""Response schemas for accounts, change alerts, the watch list and analysis."""

from datetime import datetime

from pydantic import Field

from model_tracker.schemas.common import CamelModel


class PerformanceData(CamelModel):
    final_equity: float = 0.0
    probability_win: float = 0.0
    return_ytd: float = Field(0.0, alias="returnYTD")
    return_1_month: float = Field(0.0, alias="return1Month")
    return_3_month: float = Field(0.0, alias="return3Month")
    return_6_month: float = Field(0.0, alias="return6Month")
    return_12_month: float = Field(0.0, alias="return12Month")
    trades_ytd: int = Field(0, alias="tradesYTD")
    max_drawdown: float = 0.0
    current_drawdown: float = 0.0
    sharpe_ratio: float = 0.0
    cagr: float = 0.0
    volatility: float = 0.0
    portfolio: str = ""
    ml_accuracies: str = ""
    green_holdings: list[str] = []


class ModelData(CamelModel):
    name: str
    symbol: str
    performance: PerformanceData


class AccountPortfolio(CamelModel):
    account_name: str
    models: list[ModelData]
    total_value: float
    date: str


class CurrencyPortfolio(CamelModel):
    currency: str
    models: list[ModelData]
    total_value: float


class AccountChanges(CamelModel):
    added_holdings: list[str] = []
    removed_holdings: list[str] = []
    has_changes: bool = False


class CombinedAccountPortfolio(CamelModel):
    """Full combined account, used by the single-account endpoint."""

    base_account_name: str
    currencies: list[CurrencyPortfolio]
    total_value_all_currencies: float
    date: str
    changes: AccountChanges | None = None


class CurrencySummary(CamelModel):
    currency: str
    total_value: float
    model_count: int


class CombinedAccountSummary(CamelModel):
    """Combined account without model detail, used by the list endpoint."""

    base_account_name: str
    total_value_all_currencies: float
    currencies: list[CurrencySummary]
    model_count: int
    date: str
    changes: AccountChanges | None = None


class CombinedAccountsResponse(CamelModel):
    accounts: list[CombinedAccountSummary]
    total_accounts: int
    total_value: float
    date: str


class AccountListResponse(CamelModel):
    accounts: list[str]
    total: int


class PortfolioChange(CamelModel):
    model_name: str
    account_name: str
    added_holdings: list[str]
    removed_holdings: list[str]
    date: str


class ChangeAlert(CamelModel):
    has_changes: bool
    changes: list[PortfolioChange]
    total_changes: int
    affected_accounts: list[str]
    date: str
    comparison_date: str | None = None
    message: str


class SendChangeAlertResponse(CamelModel):
    email_sent: bool
    alert: ChangeAlert


class WatchListModel(CamelModel):
    name: str
    symbol: str
    return_12_month: float = Field(..., alias="return12Month")
    return_ytd: float = Field(..., alias="returnYTD")
    final_equity: float
    sharpe_ratio: float
    max_drawdown: float
    portfolio: str
    is_owned: bool


class ModelWatchList(CamelModel):
    top_performers: list[WatchListModel]
    total_models_analyzed: int
    owned_models_count: int
    opportunity_models_count: int
    date: str


class SignificantMove(CamelModel):
    model_name: str
    account_name: str
    price_change: float
    value_change: float
    significance: str


class DailyModelMove(CamelModel):
    model_name: str
    account_name: str
    daily_change: float
    significance: str


class DailySecurityMove(CamelModel):
    security_symbol: str
    estimated_daily_change: float
    model_name: str
    account_name: str
    significance: str


class UnderperformingModel(CamelModel):
    model_name: str
    account_name: str
    return_12_month: float = Field(..., alias="return12Month")
    return_ytd: float = Field(..., alias="returnYTD")
    performance_gap: float


class PerformerSummary(CamelModel):
    name: str
    return_12_month: float = Field(..., alias="return12Month")


class PortfolioAnalysis(CamelModel):
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
    best_performer_12mo: PerformerSummary | None = Field(None, alias="bestPerformer12Mo")
    worst_performer_12mo: PerformerSummary | None = Field(None, alias="worstPerformer12Mo")


class CommentaryMetadata(CamelModel):
    timestamp: str
    tokens_used: int | None = None
    model: str
    date: str


class PortfolioCommentary(CamelModel):
    commentary: str
    analysis: PortfolioAnalysis
    metadata: CommentaryMetadata
    from_cache: bool = False


class CacheClearResponse(CamelModel):
    message: str
    cleared_at: datetime


class CacheStats(CamelModel):
    size: int
    keys: list[str]
