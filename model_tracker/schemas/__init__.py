"""Pydantic schemas for API responses."""

from model_tracker.schemas.common import CamelModel, ErrorResponse
from model_tracker.schemas.portfolio import (
    AccountChanges,
    AccountListResponse,
    AccountPortfolio,
    CacheClearResponse,
    CacheStats,
    ChangeAlert,
    CombinedAccountPortfolio,
    CombinedAccountsResponse,
    CombinedAccountSummary,
    CommentaryMetadata,
    CurrencyPortfolio,
    CurrencySummary,
    DailyModelMove,
    DailySecurityMove,
    ModelData,
    ModelWatchList,
    PerformanceData,
    PerformerSummary,
    PortfolioAnalysis,
    PortfolioChange,
    PortfolioCommentary,
    SendChangeAlertResponse,
    SignificantMove,
    UnderperformingModel,
    WatchListModel,
)

__all__ = [
    "AccountChanges",
    "AccountListResponse",
    "AccountPortfolio",
    "CacheClearResponse",
    "CacheStats",
    "CamelModel",
    "ChangeAlert",
    "CombinedAccountPortfolio",
    "CombinedAccountSummary",
    "CombinedAccountsResponse",
    "CommentaryMetadata",
    "CurrencyPortfolio",
    "CurrencySummary",
    "DailyModelMove",
    "DailySecurityMove",
    "ErrorResponse",
    "ModelData",
    "ModelWatchList",
    "PerformanceData",
    "PerformerSummary",
    "PortfolioAnalysis",
    "PortfolioChange",
    "PortfolioCommentary",
    "SendChangeAlertResponse",
    "SignificantMove",
    "UnderperformingModel",
    "WatchListModel",
]
