"""Portfolio analysis and AI commentary API router."""

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from model_tracker.config import settings
from model_tracker.dependencies import get_analysis_service, get_cache, get_commentary_client
from model_tracker.schemas.portfolio import CommentaryMetadata, PortfolioAnalysis, PortfolioCommentary
from model_tracker.services.analysis import PortfolioAnalysisService
from model_tracker.services.cache_service import CacheService
from model_tracker.services.clients import OpenAICommentaryClient
from model_tracker.services.trading_calendar_service import market_today

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


@router.get("/analysis", response_model=PortfolioAnalysis)
async def get_portfolio_analysis(
    target_date: date | None = Query(None, alias="date", description="Date to analyze (YYYY-MM-DD)"),
    service: PortfolioAnalysisService = Depends(get_analysis_service),
):
    """Moves, rankings and underperformers against the previous trading day."""
    return await service.generate_analysis_data(target_date)


@router.get("/portfolio-commentary", response_model=PortfolioCommentary)
async def get_portfolio_commentary(
    target_date: date | None = Query(None, alias="date", description="Date to analyze (YYYY-MM-DD)"),
    refresh: bool = Query(False, description="Regenerate even when a cached commentary exists"),
    service: PortfolioAnalysisService = Depends(get_analysis_service),
    client: OpenAICommentaryClient = Depends(get_commentary_client),
    cache: CacheService = Depends(get_cache),
):
    """
    AI commentary on the day's analysis data.

    Query Parameters:
        - date: Date to analyze, today's market date by default
        - refresh: Skip the cached commentary for the date

    Returns:
        Commentary, the analysis it was generated from, and generation metadata
    """
    target_date = target_date or market_today(settings.market_timezone)
    day = target_date.isoformat()

    if not refresh:
        cached = cache.get_portfolio_commentary(day)
        if cached is not None:
            logger.info(f"Returning cached portfolio commentary for {day}")
            return cached.model_copy(update={"from_cache": True})

    analysis = await service.generate_analysis_data(target_date)
    response = await asyncio.to_thread(client.generate_portfolio_commentary, analysis)

    commentary = PortfolioCommentary(
        commentary=response.commentary,
        analysis=PortfolioAnalysis.model_validate(analysis),
        metadata=CommentaryMetadata(
            timestamp=response.timestamp,
            tokens_used=response.tokens_used,
            model=response.model,
            date=day,
        ),
    )
    cache.set_portfolio_commentary(day, commentary)
    return commentary
