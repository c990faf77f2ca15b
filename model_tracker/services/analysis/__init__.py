"""Ranking and analysis of parsed models."""

from .model_watch_list_service import ModelWatchList, ModelWatchListService, WatchListModel
from .portfolio_analysis_service import (
    DailyModelMove,
    DailySecurityMove,
    PortfolioAnalysisData,
    PortfolioAnalysisService,
)

__all__ = [
    "DailyModelMove",
    "DailySecurityMove",
    "ModelWatchList",
    "ModelWatchListService",
    "PortfolioAnalysisData",
    "PortfolioAnalysisService",
    "WatchListModel",
]
