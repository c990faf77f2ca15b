"""OpenAI chat-completions client for the daily portfolio commentary."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from model_tracker.config import settings
from model_tracker.services.analysis.portfolio_analysis_service import (
    DailyModelMove,
    DailySecurityMove,
    PerformerSummary,
    PortfolioAnalysisData,
    UnderperformingModel,
)
from model_tracker.services.analysis.model_watch_list_service import WatchListModel
from model_tracker.services.exceptions import ConfigurationError, UpstreamFetchError
from model_tracker.services.shared.http_client import HTTPClient, HTTPClientError

logger = logging.getLogger(__name__)

SOURCE = "OpenAI API error"
SYSTEM_PROMPT = (
    "You are a professional portfolio analyst with expertise in investment management "
    "and market analysis. Provide concise, actionable insights based on portfolio data."
)
MAX_TOKENS = 500
TEMPERATURE = 0.3


@dataclass
class CommentaryResponse:
    commentary: str
    timestamp: str
    tokens_used: int | None
    model: str


def format_daily_model_moves(moves: list[DailyModelMove]) -> str:
    if not moves:
        return "No significant model movements detected"
    return "\n".join(
        f"{move.model_name} ({move.account_name}): {move.daily_change:.1f}% daily change "
        f"({move.significance.upper()})"
        for move in moves
    )


def format_daily_security_moves(moves: list[DailySecurityMove]) -> str:
    if not moves:
        return "No significant security movements detected"
    return "\n".join(
        f"{move.security_symbol} in {move.model_name}: {move.estimated_daily_change:.1f}% "
        f"estimated daily change ({move.significance.upper()})"
        for move in moves
    )


def format_12_month_performance(
    top_performers: list[WatchListModel],
    best: PerformerSummary | None,
    worst: PerformerSummary | None,
) -> str:
    lines = []
    if top_performers:
        average = sum(model.return_12_month for model in top_performers) / len(top_performers)
        lines.append(f"Top 5 Average: {average:.1f}%")
    if best:
        lines.append(f"Best: {best.name} (+{best.return_12_month:.1f}%)")
    if worst:
        lines.append(f"Worst: {worst.name} ({worst.return_12_month:.1f}%)")
    return "\n".join(lines) or "Performance data unavailable"


def format_underperforming_models(models: list[UnderperformingModel]) -> str:
    if not models:
        return "No significantly underperforming models detected"
    return "\n".join(
        f"{model.model_name} ({model.account_name}): 12Mo: {model.return_12_month:.1f}%, "
        f"Gap: -{model.performance_gap:.1f}%"
        for model in models
    )


def format_top_opportunities(opportunities: list[WatchListModel]) -> str:
    if not opportunities:
        return "All top performers are currently owned"
    return "\n".join(
        f"{model.name}: {model.return_12_month:.1f}% 12-month return (NOT OWNED)" for model in opportunities
    )


def build_prompt(data: PortfolioAnalysisData) -> str:
    """Two-section analyst prompt (daily data, monthly trends)."""
    return f"""You are a professional portfolio analyst. Analyze this portfolio data and provide structured insights in exactly 2 sections.

DAILY MOVEMENTS (TODAY):
- Models with >3% daily change: {format_daily_model_moves(data.daily_model_moves)}
- Securities with >5% estimated daily change: {format_daily_security_moves(data.daily_security_moves)}

12-MONTH PERFORMANCE ANALYSIS:
{format_12_month_performance(data.top5_performers, data.best_performer_12mo, data.worst_performer_12mo)}

UNDERPERFORMING MODELS (>10% below top performers):
{format_underperforming_models(data.underperforming_models)}

TOP OPPORTUNITIES NOT OWNED:
{format_top_opportunities(data.top5_not_owned)}

Format your response in exactly these 2 sections:

**DAILY DATA:**
Focus on immediate actionable items:
- Individual security alerts for holdings with large moves (>5% daily change)
- Model alerts for significant daily movements (>3% daily change)
- Any urgent actions required today

**MONTHLY TRENDS:**
Focus on longer-term strategic analysis:
- Model performance gaps vs top 5 performers
- Whether performance gaps are narrowing or widening (1-month trends)
- Strategic rebalancing recommendations
- Top opportunities not currently owned

Use professional bullet points. Keep each section concise and actionable."""


class OpenAICommentaryClient(HTTPClient):
    """Generates portfolio commentary with the chat completions API.

    Raises:
        ConfigurationError: At construction, when no API key is configured
    """

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or settings.openai_api_key
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY")
        self.model = model or settings.openai_model
        super().__init__(
            base_url=settings.openai_base_url,
            timeout=60.0,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    def complete(self, prompt: str, system_prompt: str = SYSTEM_PROMPT) -> dict:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }
        try:
            return self.post_json("/chat/completions", json=payload)
        except HTTPClientError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise UpstreamFetchError(SOURCE, str(e)) from e

    def generate_portfolio_commentary(self, data: PortfolioAnalysisData) -> CommentaryResponse:
        """
        Commentary for one day's analysis data.

        Raises:
            UpstreamFetchError: On request failure or an empty completion
        """
        response = self.complete(build_prompt(data))

        choices = response.get("choices") or []
        if not choices:
            raise UpstreamFetchError(SOURCE, "No response from OpenAI API")

        content = (choices[0].get("message") or {}).get("content") or "Unable to generate commentary"
        tokens_used = (response.get("usage") or {}).get("total_tokens")
        logger.info(f"Portfolio commentary generated ({tokens_used} tokens used)")

        return CommentaryResponse(
            commentary=content.strip(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            tokens_used=tokens_used,
            model=response.get("model") or self.model,
        )
